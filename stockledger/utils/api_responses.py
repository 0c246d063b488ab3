from typing import Any, Dict, Optional

from flask import jsonify


def envelope(success: bool, data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    """Uniform ``{success, data, message}`` result for every dispatched action"""
    return {
        'success': bool(success),
        'data': data,
        'message': message or ("Operation successful" if success else "Operation failed"),
    }


class APIResponse:
    """Standardized API response handler"""

    @staticmethod
    def from_envelope(result: Dict[str, Any], status_code: int = 200):
        return jsonify(result), status_code

    @staticmethod
    def error(message: str, status_code: int = 400):
        """Envelope-shaped transport error (bad body, missing action)"""
        return jsonify(envelope(False, None, message)), status_code
