"""
tests/conftest.py
最简化但最可靠的配置
"""
import pytest
import os

# ========== 关键：在导入app之前设置环境变量 ==========
os.environ['DB_URL'] = 'sqlite:///:memory:'
os.environ['TESTING'] = 'true'

# ========== 导入app ==========
from app import app
from models import db, Word, Progress

# 固定的测试时间: 2024-05-01 00:00:00 UTC
NOW = 1714521600000


@pytest.fixture(scope='session', autouse=True)
def setup_test_environment():
    """
    设置测试环境 - 只在会话开始时执行一次
    """
    app.config.update({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    })

    with app.app_context():
        db.create_all()

    yield


def _clear_tables():
    db.session.query(Word).delete()
    db.session.query(Progress).delete()
    db.session.commit()


@pytest.fixture
def test_client():
    """
    测试客户端fixture - 每个测试函数一个干净的客户端
    """
    with app.test_client() as client:
        with app.app_context():
            db.create_all()
            _clear_tables()

        yield client

        # 测试后清理
        with app.app_context():
            _clear_tables()
            db.session.remove()


@pytest.fixture
def app_context():
    """
    直接调用 store 函数时使用的应用上下文 (数据已清空)
    """
    with app.app_context():
        db.create_all()
        _clear_tables()
        yield
        db.session.rollback()
        _clear_tables()


@pytest.fixture
def sample_words(test_client):
    """
    预置测试单词数据: 一个到期、一个刚好到期、一个未到期
    """
    with app.app_context():
        words_data = [
            {'term': 'apple', 'definition': '苹果', 'next_review_at': NOW - 1},
            {'term': 'banana', 'definition': '香蕉', 'next_review_at': NOW},
            {'term': 'cat', 'definition': '猫', 'next_review_at': NOW + 1},
        ]

        ids = []
        for i, data in enumerate(words_data):
            word = Word(level=0, last_reviewed_at=0, wrong_count=0, added_at=NOW + i, **data)
            db.session.add(word)
            db.session.flush()
            ids.append(word.id)

        db.session.commit()

    yield ids


# ========== 注册pytest标记 ==========

def pytest_configure(config):
    config.addinivalue_line("markers", "unit: 标记为单元测试")
    config.addinivalue_line("markers", "integration: 标记为集成测试")
    config.addinivalue_line("markers", "e2e: 标记为端到端测试")
