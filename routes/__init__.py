# routes/__init__.py
# Blueprints share one response envelope: {"data": ..., "error": null}

from flask import jsonify


def ok(data, status=200):
    return jsonify({'data': data, 'error': None}), status
