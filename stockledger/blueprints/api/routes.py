import logging
import time

from flask import current_app, jsonify, request

from ...api_schema import build_schema
from ...errors import StoreFailure
from ...extensions import limiter
from ...store import Store
from ...utils.api_responses import APIResponse
from . import api_bp

logger = logging.getLogger(__name__)

RECENT_TRANSACTIONS = 10


def _dispatcher():
    return current_app.extensions['stockledger.dispatcher']


@api_bp.route('/action', methods=['POST'])
@limiter.limit(lambda: current_app.config.get('RATELIMIT_ACTION', '600 per minute'))
def action():
    """Dispatch one structured ``{action, params}`` request"""
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return APIResponse.error("Request body must be a JSON object")

    action_name = body.get('action')
    if not isinstance(action_name, str) or not action_name.strip():
        return APIResponse.error("Action is required")

    started = time.perf_counter()
    result = _dispatcher().invoke(action_name, body.get('params') or {})
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info("POST /action %s success=%s - %.1fms", action_name, result['success'], elapsed_ms)
    return APIResponse.from_envelope(result)


@api_bp.route('/query', methods=['GET', 'POST'])
@limiter.limit(lambda: current_app.config.get('RATELIMIT_ACTION', '600 per minute'))
def query():
    """Schema plus a snapshot of current inventory, for a client composing its next action"""
    prompt = None
    if request.method == 'POST':
        body = request.get_json(silent=True)
        prompt = body.get('prompt') if isinstance(body, dict) else None
        if not isinstance(prompt, str) or not prompt.strip():
            return APIResponse.error("Prompt is required")

    try:
        context = _dispatcher().context_snapshot(recent=RECENT_TRANSACTIONS)
    except StoreFailure as exc:
        logger.error("Query context unavailable: %s", exc.message)
        return APIResponse.error("Inventory store unavailable", status_code=503)

    return jsonify({
        'success': True,
        'prompt': prompt,
        'schema': build_schema(),
        'context': context,
        'message': "Use the schema and provided context to compose inventory actions",
    })


@api_bp.route('/schema', methods=['GET'])
def schema():
    return jsonify(build_schema())


@api_bp.route('/health', methods=['GET'])
@limiter.exempt
def health():
    try:
        Store.from_app().ping()
    except StoreFailure:
        return jsonify({'status': 'unavailable'}), 503
    return jsonify({'status': 'ok'})
