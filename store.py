# store.py
"""
词库与学习进度的读写操作。

调度计算全部交给 srs.py，这里只负责把结果写回 Word / Progress 并提交。
所有函数都接受可选的 now (毫秒时间戳)，方便测试时固定时间。
"""
import re
import time
from datetime import datetime, timedelta, timezone

from flask import current_app

from models import db, Word, Progress
from srs import MAX_LEVEL, advance_on_success, reset_on_failure, select_due

# 每完成一轮测验奖励的积分
QUIZ_POINTS = 10

# 词表行的分隔符: apple - 苹果 / apple: 苹果 / apple = 苹果
LINE_SEPARATOR = re.compile(r'[-:=]')

# update_word 允许修改的字段 (接口字段名 -> 列名)
UPDATABLE_FIELDS = {
    'term': 'term',
    'definition': 'definition',
    'level': 'level',
    'nextReviewAt': 'next_review_at',
    'lastReviewedAt': 'last_reviewed_at',
    'wrongCount': 'wrong_count',
    'audioUrl': 'audio_url',
}


def now_ms():
    return int(time.time() * 1000)


def _clean(value, name):
    if value is not None and not isinstance(value, str):
        raise ValueError(f'{name} 必须是字符串')
    value = (value or '').strip()
    if not value:
        raise ValueError(f'{name} 不能为空')
    return value


def _optional_url(value, name):
    if value is not None and not isinstance(value, str):
        raise ValueError(f'{name} 必须是字符串')
    return (value or '').strip() or None


def _build_word(term, definition, audio_url, now):
    return Word(
        term=term,
        definition=definition,
        level=0,
        next_review_at=now,
        last_reviewed_at=0,
        wrong_count=0,
        added_at=now,
        audio_url=audio_url or None,
    )


def get_word(word_id):
    return db.session.get(Word, word_id)


def list_words():
    return Word.query.order_by(Word.added_at, Word.id).all()


def add_word(term, definition, audio_url=None, now=None):
    now = now_ms() if now is None else now
    word = _build_word(_clean(term, 'term'), _clean(definition, 'definition'),
                       _optional_url(audio_url, 'audioUrl'), now)
    db.session.add(word)
    db.session.commit()
    current_app.logger.info('添加单词 %s (%s)', word.term, word.id)
    return word


def bulk_add_words(pairs, now=None):
    """批量添加，跳过已存在的单词 (不区分大小写)，返回新增的单词"""
    now = now_ms() if now is None else now
    seen = {w.term.lower() for w in Word.query.with_entities(Word.term)}
    added = []
    for term, definition in pairs:
        term = (term or '').strip()
        definition = (definition or '').strip()
        if not term or not definition or term.lower() in seen:
            continue
        seen.add(term.lower())
        word = _build_word(term, definition, None, now)
        db.session.add(word)
        added.append(word)

    if added:
        db.session.commit()
        current_app.logger.info('批量导入 %d 个新单词', len(added))
    return added


def parse_word_lines(text):
    """把 "单词 - 释义" 格式的文本拆成 (term, definition) 列表"""
    pairs = []
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        parts = LINE_SEPARATOR.split(line)
        if len(parts) < 2:
            continue
        term, definition = parts[0].strip(), parts[1].strip()
        if term and definition:
            pairs.append((term, definition))
    return pairs


def edit_word(word_id, term, definition):
    word = get_word(word_id)
    if word is None:
        return None
    word.term = _clean(term, 'term')
    word.definition = _clean(definition, 'definition')
    db.session.commit()
    return word


def update_word(word_id, updates):
    word = get_word(word_id)
    if word is None:
        return None

    for key, value in updates.items():
        column = UPDATABLE_FIELDS.get(key)
        if column is None:
            raise ValueError(f'不支持修改字段: {key}')
        if column in ('term', 'definition'):
            value = _clean(value, key)
        elif column == 'audio_url':
            value = _optional_url(value, key)
        elif column == 'level':
            value = min(max(int(value), 0), MAX_LEVEL)
        elif column == 'wrong_count':
            value = int(value)
            if value < word.wrong_count:
                raise ValueError('wrongCount 不能减少')
        elif column in ('next_review_at', 'last_reviewed_at'):
            value = int(value)
            if value < 0:
                raise ValueError(f'{key} 不能为负数')
        setattr(word, column, value)

    db.session.commit()
    return word


def delete_word(word_id):
    word = get_word(word_id)
    if word is None:
        return False
    db.session.delete(word)
    db.session.commit()
    return True


# --- 测验 ---

def is_correct_answer(answer, term):
    """语音识别结果里包含目标单词就算答对"""
    if not isinstance(answer, str) or not answer or not term:
        return False
    return term.strip().lower() in answer.lower()


def apply_review(word, correct, now=None):
    """把一次作答结果写到单词上 (不提交)"""
    now = now_ms() if now is None else now
    if correct:
        result = advance_on_success(word.level, now)
    else:
        result = reset_on_failure(now)
        word.wrong_count = (word.wrong_count or 0) + 1
    word.level = result.next_level
    word.next_review_at = result.next_review_at
    word.last_reviewed_at = now
    return word


def review_word(word_id, correct, now=None):
    word = get_word(word_id)
    if word is None:
        return None
    apply_review(word, correct, now)
    db.session.commit()
    return word


def due_words(now=None):
    now = now_ms() if now is None else now
    return select_due(list_words(), now)


# --- 学习进度 ---

def load_progress():
    progress = db.session.get(Progress, 1)
    if progress is None:
        progress = Progress(id=1, daily_streak=0, total_points=0)
        db.session.add(progress)
        db.session.flush()
    return progress


def save_progress(progress):
    db.session.add(progress)
    db.session.commit()
    return progress


def utc_date(now):
    return datetime.fromtimestamp(now / 1000, tz=timezone.utc).date()


def update_streak(progress, today):
    """同一天不变，昨天学过则 +1，否则从 1 重新开始"""
    today_str = today.isoformat()
    if progress.last_study_date == today_str:
        return progress

    yesterday_str = (today - timedelta(days=1)).isoformat()
    if progress.last_study_date == yesterday_str:
        progress.daily_streak = (progress.daily_streak or 0) + 1
    else:
        progress.daily_streak = 1
    progress.last_study_date = today_str
    return progress


def finish_quiz(results, now=None):
    """
    结束一轮测验。

    results: [(word_id, correct), ...]
    返回 (progress, 未找到的 word_id 列表)
    """
    now = now_ms() if now is None else now
    missing = []
    for word_id, correct in results:
        word = get_word(word_id)
        if word is None:
            missing.append(word_id)
            continue
        apply_review(word, correct, now)

    if missing:
        current_app.logger.warning('测验结果中有不存在的单词: %s', missing)

    progress = load_progress()
    progress.total_points = (progress.total_points or 0) + QUIZ_POINTS
    update_streak(progress, utc_date(now))
    save_progress(progress)
    return progress, missing


def dashboard_stats(now=None):
    now = now_ms() if now is None else now
    words = list_words()
    progress = load_progress()
    return {
        'total': len(words),
        'due': len(select_due(words, now)),
        'mastered': sum(1 for w in words if w.level >= MAX_LEVEL),
        'dailyStreak': progress.daily_streak,
        'totalPoints': progress.total_points,
    }
