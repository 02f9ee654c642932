# services.py
from datetime import datetime, timezone

import requests
from flask import current_app

from config import Config


class SyncError(Exception):
    """与 Google Apps Script 同步失败"""


def sync_to_gas(url, words, timeout=None):
    """把词库推送到 Google 表格"""
    payload = {
        "action": "sync",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "words": [
            {
                "term": w.term,
                "definition": w.definition,
                "level": w.level,
                "wrongCount": w.wrong_count,
            }
            for w in words
        ],
    }
    try:
        response = requests.post(
            url,
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=timeout or Config.GAS_TIMEOUT,
        )
    except requests.RequestException as e:
        current_app.logger.error("GAS Sync Error: %s", e)
        raise SyncError(f"同步失败: {e}") from e

    if not response.ok:
        raise SyncError(f"同步失败: HTTP {response.status_code}")
    return len(payload["words"])


def fetch_from_gas(url, timeout=None):
    """从 Google 表格读取单词，返回 [(term, definition), ...]"""
    try:
        response = requests.get(
            url,
            params={"action": "read"},
            timeout=timeout or Config.GAS_TIMEOUT,
        )
    except requests.RequestException as e:
        current_app.logger.error("GAS Fetch Error: %s", e)
        raise SyncError(f"读取失败: {e}") from e

    if not response.ok:
        raise SyncError(f"读取失败: HTTP {response.status_code}")

    try:
        words = response.json()["words"]
        pairs = []
        for item in words:
            term, definition = item["term"], item["definition"]
            # 表格里的数字单元格会以 JSON 数字返回
            if term is None or definition is None:
                continue
            pairs.append((str(term), str(definition)))
        return pairs
    except (ValueError, KeyError, TypeError) as e:
        current_app.logger.error("GAS 返回数据格式错误: %s", response.text[:200])
        raise SyncError("读取失败: 返回数据格式错误") from e
