# app.py
from flask import Flask, request, jsonify
from config import Config
from models import db
from services import SyncError, sync_to_gas, fetch_from_gas
import store
import os
import sys
import chardet # 引入字符编码检测库

# 判断是否在测试环境中
TESTING = 'pytest' in sys.modules or 'unittest' in sys.modules or os.getenv('TESTING') == 'true'

app = Flask(__name__)

if TESTING:
    # 测试环境：使用SQLite，禁用连接池
    app.config.update({
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'TESTING': True,
        'SQLALCHEMY_ENGINE_OPTIONS': {}  # 空配置，避免连接池参数
    })
else:
    # 生产环境：使用原始配置
    app.config.from_object(Config)
    app.config['SQLALCHEMY_ENGINE_OPTIONS'] = {
        "pool_recycle": 300,
        "pool_size": 10,
        "pool_timeout": 10
    }

db.init_app(app)


def _bad_request(message):
    db.session.rollback()
    return jsonify({'error': message}), 400


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _gas_url(progress):
    return progress.gas_url or Config.GAS_URL


# --- 单词 ---

@app.route('/api/words', methods=['GET'])
def get_words():
    return jsonify([w.to_dict() for w in store.list_words()])

@app.route('/api/words', methods=['POST'])
def add_word():
    data = _json_body()
    try:
        word = store.add_word(data.get('term'), data.get('definition'), data.get('audioUrl'))
    except ValueError as e:
        return _bad_request(str(e))
    return jsonify(word.to_dict()), 201

@app.route('/api/words/<word_id>', methods=['PATCH'])
def update_word(word_id):
    data = _json_body()
    if not data:
        return _bad_request('没有需要修改的字段')
    try:
        word = store.update_word(word_id, data)
    except (ValueError, TypeError, OverflowError) as e:
        return _bad_request(str(e))
    if word is None:
        return jsonify({'error': 'Word not found'}), 404
    return jsonify(word.to_dict()), 200

@app.route('/api/words/<word_id>', methods=['DELETE'])
def delete_word(word_id):
    if not store.delete_word(word_id):
        return jsonify({'error': 'Word not found'}), 404
    return jsonify({'message': 'Deleted'}), 200

@app.route('/api/upload', methods=['POST'])
def upload_file():
    if 'file' not in request.files:
        return jsonify({'error': 'No file part'}), 400
    file = request.files['file']

    # 1. 读取原始二进制数据
    raw_data = file.read()
    if not raw_data:
        return jsonify({'message': '成功导入 0 个新单词', 'new_words': []}), 200

    # 2. 自动检测编码
    result = chardet.detect(raw_data)
    encoding = result['encoding'] or 'utf-8'
    if result['confidence'] < 0.3:
        encoding = 'utf-8' # 兜底策略

    try:
        content = raw_data.decode(encoding)
    except (UnicodeDecodeError, LookupError):
        # 如果自动识别的编码解码失败，尝试用 utf-8 强制解码
        try:
            content = raw_data.decode('utf-8')
        except UnicodeDecodeError:
            return jsonify({'error': '无法识别该文件编码'}), 400

    # 包含零字节的通常是二进制文件（比如图片），直接拦截
    if '\x00' in content:
        return jsonify({'error': '文件内容非法：检测到二进制流'}), 400

    pairs = store.parse_word_lines(content)
    added = store.bulk_add_words(pairs)
    return jsonify({
        'message': f'成功导入 {len(added)} 个新单词。',
        'new_words': [w.to_dict() for w in added]
    })

# --- 复习 ---

@app.route('/api/due', methods=['GET'])
def get_due_words():
    return jsonify([w.to_dict() for w in store.due_words()])

@app.route('/api/review/<word_id>', methods=['POST'])
def review_word(word_id):
    data = _json_body()
    word = store.get_word(word_id)
    if word is None:
        return jsonify({'error': 'Word not found'}), 404

    if 'correct' in data:
        correct = data['correct']
        if not isinstance(correct, bool):
            return _bad_request('correct 必须是布尔值')
    elif 'answer' in data:
        if not isinstance(data['answer'], str):
            return _bad_request('answer 必须是字符串')
        correct = store.is_correct_answer(data['answer'], word.term)
    else:
        return _bad_request('需要 correct 或 answer 字段')

    word = store.review_word(word_id, correct)
    return jsonify({'correct': correct, 'word': word.to_dict()}), 200

@app.route('/api/quiz/finish', methods=['POST'])
def finish_quiz():
    data = _json_body()
    results = data.get('results')
    if not isinstance(results, list):
        return _bad_request('results 必须是列表')
    try:
        pairs = [(item['id'], item['correct']) for item in results]
    except (KeyError, TypeError):
        return _bad_request('results 格式错误')
    for word_id, correct in pairs:
        if not isinstance(word_id, str) or not isinstance(correct, bool):
            return _bad_request('results 格式错误')

    progress, missing = store.finish_quiz(pairs)
    return jsonify({'progress': progress.to_dict(), 'missing': missing}), 200

@app.route('/api/stats', methods=['GET'])
def get_stats():
    return jsonify(store.dashboard_stats())

# --- 设置与同步 ---

@app.route('/api/settings', methods=['GET'])
def get_settings():
    progress = store.load_progress()
    db.session.commit()
    return jsonify({'gasUrl': _gas_url(progress) or None})

@app.route('/api/settings', methods=['PUT'])
def update_settings():
    data = _json_body()
    if 'gasUrl' not in data:
        return _bad_request('需要 gasUrl 字段')
    gas_url = data['gasUrl']
    if gas_url is not None and not isinstance(gas_url, str):
        return _bad_request('gasUrl 必须是字符串')
    progress = store.load_progress()
    progress.gas_url = (gas_url or '').strip() or None
    store.save_progress(progress)
    return jsonify({'gasUrl': progress.gas_url}), 200

@app.route('/api/sync/push', methods=['POST'])
def sync_push():
    url = _gas_url(store.load_progress())
    if not url:
        return _bad_request('请先配置 Google Apps Script 地址')
    try:
        count = sync_to_gas(url, store.list_words())
    except SyncError as e:
        app.logger.error('推送词库失败: %s', e)
        return jsonify({'error': str(e)}), 502
    return jsonify({'message': f'已同步 {count} 个单词'}), 200

@app.route('/api/sync/pull', methods=['POST'])
def sync_pull():
    url = _gas_url(store.load_progress())
    if not url:
        return _bad_request('请先配置 Google Apps Script 地址')
    try:
        pairs = fetch_from_gas(url)
    except SyncError as e:
        app.logger.error('读取表格失败: %s', e)
        return jsonify({'error': str(e)}), 502
    added = store.bulk_add_words(pairs)
    return jsonify({
        'message': f'成功导入 {len(added)} 个新单词。',
        'new_words': [w.to_dict() for w in added]
    }), 200



if __name__ == '__main__':
    with app.app_context():
        db.create_all()  # 只有手动运行 app.py 时才会连接真实数据库
    app.run(host='0.0.0.0', port=5000, debug=True)
