# models.py
import uuid

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def new_word_id():
    return uuid.uuid4().hex


class Word(db.Model):
    __tablename__ = 'words'
    id = db.Column(db.String(32), primary_key=True, default=new_word_id)
    term = db.Column(db.String(100), nullable=False)
    definition = db.Column(db.String(255), nullable=False)
    # 记忆等级: 0=新词, 1~7 对应复习间隔表, 7=已掌握
    level = db.Column(db.Integer, nullable=False, default=0)
    # 时间均为毫秒时间戳
    next_review_at = db.Column(db.BigInteger, nullable=False, default=0)
    last_reviewed_at = db.Column(db.BigInteger, nullable=False, default=0)
    wrong_count = db.Column(db.Integer, nullable=False, default=0)
    added_at = db.Column(db.BigInteger, nullable=False, default=0)
    audio_url = db.Column(db.String(500), nullable=True)

    def to_dict(self):
        data = {
            'id': self.id,
            'term': self.term,
            'definition': self.definition,
            'level': self.level,
            'nextReviewAt': self.next_review_at,
            'lastReviewedAt': self.last_reviewed_at,
            'wrongCount': self.wrong_count,
            'addedAt': self.added_at,
        }
        if self.audio_url:
            data['audioUrl'] = self.audio_url
        return data


class Progress(db.Model):
    """学习进度，整张表只有一行"""
    __tablename__ = 'progress'
    id = db.Column(db.Integer, primary_key=True)
    daily_streak = db.Column(db.Integer, nullable=False, default=0)
    last_study_date = db.Column(db.String(10), nullable=True)  # YYYY-MM-DD (UTC)
    total_points = db.Column(db.Integer, nullable=False, default=0)
    gas_url = db.Column(db.String(500), nullable=True)

    def to_dict(self):
        return {
            'dailyStreak': self.daily_streak,
            'lastStudyDate': self.last_study_date,
            'totalPoints': self.total_points,
            'gasUrl': self.gas_url,
        }
