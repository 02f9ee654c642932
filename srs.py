# srs.py
"""
间隔重复调度引擎 (基于艾宾浩斯遗忘曲线)

纯函数，不读取系统时间，不修改传入的单词。当前时间 (毫秒时间戳) 由调用方传入。
"""
from collections import namedtuple

# 复习间隔 (秒)，下标 0 对应第 1 级
SRS_INTERVALS = [
    600,        # Level 1: 10 分钟
    3600,       # Level 2: 1 小时
    86400,      # Level 3: 1 天
    259200,     # Level 4: 3 天
    604800,     # Level 5: 7 天
    1209600,    # Level 6: 14 天
    2592000,    # Level 7: 30 天 - 完成!
]

MAX_LEVEL = len(SRS_INTERVALS)
FAILURE_LEVEL = 1

ReviewResult = namedtuple('ReviewResult', ['next_level', 'next_review_at'])


def _as_level(level):
    # 负数或无法识别的等级一律当作 0
    try:
        level = int(level)
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(level, 0)


def interval_for_level(level):
    """等级 (1 起) 对应的间隔秒数，超出范围时夹到表的两端"""
    index = min(max(_as_level(level), 1), MAX_LEVEL) - 1
    return SRS_INTERVALS[index]


def advance_on_success(current_level, now):
    """答对: 升一级 (最高 7 级)，按新等级安排下次复习"""
    next_level = min(_as_level(current_level) + 1, MAX_LEVEL)
    if next_level <= len(SRS_INTERVALS):
        interval = SRS_INTERVALS[next_level - 1]
    else:
        interval = SRS_INTERVALS[-1]
    return ReviewResult(next_level, now + interval * 1000)


def reset_on_failure(now):
    """答错: 退回第 1 级，10 分钟后再复习"""
    return ReviewResult(FAILURE_LEVEL, now + SRS_INTERVALS[0] * 1000)


def _next_review_at(word):
    if isinstance(word, dict):
        return word['nextReviewAt']
    return word.next_review_at


def select_due(words, now):
    """筛选出到期 (nextReviewAt <= now) 的单词，保持原有顺序"""
    return [w for w in words if _next_review_at(w) <= now]
