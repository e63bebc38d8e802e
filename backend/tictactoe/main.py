from flask import Blueprint, jsonify, current_app

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return 'Hello World!'

@main.route('/api/test')
def api_test():
    try:
        current_app.logger.info('[health] ok')
        return jsonify({'status': 'success', 'message': 'hello world'}), 200
    except Exception:
        current_app.logger.exception('[health] failed')
        return jsonify({'status': 'error', 'message': 'internal server error'}), 500
