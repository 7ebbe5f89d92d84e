from flask import Blueprint, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return 'Bingo Game Server is running!'

@main.route('/health')
def health():
    return jsonify({'status': 'ok'})
