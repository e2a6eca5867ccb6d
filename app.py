import io
import hashlib
import logging
from functools import wraps
from typing import Dict, Optional

from flask import Flask, request, jsonify, send_file
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_caching import Cache

# WSGIMiddleware lets Uvicorn (ASGI) serve the Flask (WSGI) app
from uvicorn.middleware.wsgi import WSGIMiddleware

from name_corrector.config import Settings, configure_logging
from name_corrector.errors import LLMUnavailableError
from name_corrector.llm import (
    LLMManager,
    NameSuggestionEngine,
    build_chat_messages,
    generate_chat_response,
    generate_report_markdown,
)
from name_corrector.metrics import (
    calculate_expression_number_with_details,
    calculate_personality_number_with_details,
    calculate_soul_urge_number_with_details,
    check_karmic_debt,
    first_name_value,
)
from name_corrector.profile import get_comprehensive_numerology_profile
from name_corrector.reports import create_numerology_pdf
from name_corrector.rules import filter_strictly_valid_suggestions, validate_suggested_name_rules

settings = Settings.from_env()
configure_logging(settings)
logger = logging.getLogger(__name__)

app = Flask(__name__)
logger.info("Flask app instance created.")
app.config['SECRET_KEY'] = settings.secret_key
app.config['CACHE_TYPE'] = settings.cache_type
app.config['CACHE_DEFAULT_TIMEOUT'] = settings.cache_default_timeout
app.config['RATELIMIT_ENABLED'] = settings.ratelimit_enabled

cache = Cache(app)
limiter = Limiter(
    get_remote_address,
    app=app,
    default_limits=["200 per day", "50 per hour"],
    storage_uri=settings.redis_url,
)
logger.info("Flask-Caching and Flask-Limiter initialized.")

CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)

CHAT_MODES = {'general', 'name_validation'}

_llm_manager: Optional[LLMManager] = None


def get_llm_manager() -> LLMManager:
    """Creates the LLM instances on first use so the service starts without a key."""
    global _llm_manager
    if _llm_manager is None:
        _llm_manager = LLMManager(settings)
    return _llm_manager


# --- Decorators ---
def cached_operation(timeout=3600):
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            # Create a unique cache key based on function name and arguments
            key_parts = [func.__name__] + [str(arg) for arg in args]
            for k, v in sorted(kwargs.items()):
                key_parts.append(f"{k}={v}")
            cache_key = hashlib.md5("_".join(key_parts).encode()).hexdigest()

            cached_result = cache.get(cache_key)
            if cached_result is not None:
                logger.info(f"Cache hit for {func.__name__}")
                return cached_result

            result = func(*args, **kwargs)
            cache.set(cache_key, result, timeout=timeout)
            logger.info(f"Cache miss for {func.__name__}, result cached.")
            return result
        return wrapper
    return decorator


@cached_operation(timeout=settings.profile_cache_timeout)
def get_cached_profile(full_name: str, birth_date: str, birth_time: Optional[str] = None,
                       birth_place: Optional[str] = None, desired_outcome: Optional[str] = None) -> Dict:
    return get_comprehensive_numerology_profile(
        full_name=full_name,
        birth_date=birth_date,
        birth_time=birth_time,
        birth_place=birth_place,
        desired_outcome=desired_outcome,
    )


def _report_profile(report_request: Dict) -> Dict:
    """Profile for a report request, with the confirmed names re-checked by the strict filter."""
    profile_details = dict(get_cached_profile(
        report_request['full_name'],
        report_request['birth_date'],
        birth_time=report_request.get('birth_time'),
        birth_place=report_request.get('birth_place'),
        desired_outcome=report_request.get('desired_outcome'),
    ))
    confirmed_raw = report_request.get('confirmed_suggestions') or []
    profile_details['confirmed_suggestions'] = filter_strictly_valid_suggestions(
        confirmed_raw,
        profile_details.get('life_path_number'),
        profile_details.get('birth_day_number'),
    )
    dropped = len(confirmed_raw) - len(profile_details['confirmed_suggestions'])
    if dropped:
        logger.warning(f"Dropped {dropped} confirmed suggestion(s) that failed the strict filter.")
    return profile_details


def _missing_report_fields(report_request: Optional[Dict]) -> bool:
    return not report_request or not all([
        report_request.get('full_name'),
        report_request.get('birth_date'),
        report_request.get('confirmed_suggestions') is not None,
    ])


# --- Flask Routes ---
@app.route('/')
def home():
    """Basic home route for health check."""
    return "Numerology Name Corrector is running."


@app.route('/initial_suggestions', methods=['POST'])
@limiter.limit("10 per minute")
async def initial_suggestions_endpoint():
    data = request.get_json(silent=True) or {}
    full_name = data.get('full_name')
    birth_date = data.get('birth_date')

    if not all([full_name, birth_date]):
        return jsonify({"error": "Missing full_name or birth_date for initial suggestions."}), 400

    try:
        profile_data = get_cached_profile(
            full_name,
            birth_date,
            birth_time=data.get('birth_time'),
            birth_place=data.get('birth_place'),
            desired_outcome=data.get('desired_outcome'),
        )

        target_numbers = NameSuggestionEngine.determine_target_numbers_for_outcome(data.get('desired_outcome'))
        name_suggestions_output = await NameSuggestionEngine.generate_name_suggestions(
            get_llm_manager().creative_llm,
            full_name,
            target_numbers,
            data.get('desired_outcome'),
        )

        suggestions = [s.model_dump() for s in name_suggestions_output.suggestions]
        filtered = filter_strictly_valid_suggestions(
            suggestions,
            profile_data.get('life_path_number'),
            profile_data.get('birth_day_number'),
        )
        logger.info(f"Returning {len(filtered)} of {len(suggestions)} suggestion(s) for '{full_name}'.")

        return jsonify({
            "suggestions": filtered,
            "reasoning": name_suggestions_output.reasoning,
            "profile_data": profile_data,
        }), 200

    except LLMUnavailableError:
        raise
    except Exception as e:
        logger.error(f"Error generating initial suggestions: {e}", exc_info=True)
        return jsonify({"error": "An internal server error occurred while generating initial suggestions. Please try again later."}), 500


@app.route('/validate_name', methods=['POST'])
@limiter.limit("30 per minute")
def validate_name_endpoint():
    """
    Validates a single suggested name against the client's profile and rules.
    Returns a clear YES/NO and a detailed rationale.
    """
    data = request.get_json(silent=True)
    if not data:
        logger.error("Validation request received with no JSON data.")
        return jsonify({"error": "No data provided for validation."}), 400

    suggested_name = data.get('suggested_name')
    client_profile = data.get('client_profile')

    if not suggested_name or not isinstance(suggested_name, str) or not suggested_name.strip():
        logger.error(f"Validation request missing or invalid 'suggested_name': '{suggested_name}'")
        return jsonify({"error": "Missing or empty 'suggested_name' for validation."}), 400

    if not client_profile or not isinstance(client_profile, dict):
        logger.error(f"Validation request missing or invalid 'client_profile': '{client_profile}'")
        return jsonify({"error": "Missing or invalid 'client_profile' for validation."}), 400

    try:
        is_valid, rationale = validate_suggested_name_rules(suggested_name, client_profile)
        suggested_exp_num, _ = calculate_expression_number_with_details(suggested_name)
        soul_urge_num, _ = calculate_soul_urge_number_with_details(suggested_name)
        personality_num, _ = calculate_personality_number_with_details(suggested_name)

        return jsonify({
            "suggested_name": suggested_name,
            "is_valid": is_valid,
            "rationale": rationale,
            "expression_number": suggested_exp_num,
            "first_name_value": first_name_value(suggested_name),
            "soul_urge_number": soul_urge_num,
            "personality_number": personality_num,
            "karmic_debt_present": bool(check_karmic_debt(suggested_name)),
        }), 200

    except Exception as e:
        logger.error(f"Error validating name: {e}", exc_info=True)
        return jsonify({"error": "An internal server error occurred during name validation. Please try again later."}), 500


@app.route('/generate_text_report', methods=['POST'])
@limiter.limit("5 per minute")
async def generate_text_report_endpoint():
    """Returns the report as Markdown, used for the preview."""
    report_request = request.get_json(silent=True)
    if _missing_report_fields(report_request):
        return jsonify({"error": "Missing essential data (full_name, birth_date, or confirmed_suggestions) for text report generation."}), 400

    try:
        profile_details = _report_profile(report_request)
        report_content = await generate_report_markdown(get_llm_manager().creative_llm, profile_details)
        return jsonify({"report_content": report_content}), 200

    except LLMUnavailableError:
        raise
    except Exception as e:
        logger.error(f"Error generating text report for preview: {e}", exc_info=True)
        return jsonify({"error": f"Failed to generate text report for preview: {e}"}), 500


@app.route('/generate_pdf_report', methods=['POST'])
@limiter.limit("5 per hour")
async def generate_pdf_report_endpoint():
    """
    Returns the PDF report. A previously generated preview may be passed as
    'report_content' to avoid a second model call.
    """
    report_request = request.get_json(silent=True)
    if _missing_report_fields(report_request):
        return jsonify({"error": "Missing essential data (full_name, birth_date, or confirmed_suggestions) for PDF generation."}), 400

    try:
        profile_details = _report_profile(report_request)
        report_content = report_request.get('report_content')
        if not report_content:
            report_content = await generate_report_markdown(get_llm_manager().creative_llm, profile_details)

        pdf_bytes = create_numerology_pdf({
            "full_name": profile_details['full_name'],
            "birth_date": profile_details['birth_date'],
            "profile_details": profile_details,
            "intro_response": report_content,
            "confirmed_suggestions": profile_details['confirmed_suggestions'],
        })

        filename = f"Numerology_Report_{report_request['full_name'].replace(' ', '_')}.pdf"
        return send_file(
            io.BytesIO(pdf_bytes),
            mimetype='application/pdf',
            as_attachment=True,
            download_name=filename,
        )

    except LLMUnavailableError:
        raise
    except Exception as e:
        logger.error(f"Error generating PDF report: {e}", exc_info=True)
        return jsonify({"error": f"Failed to generate PDF report: {e}"}), 500


@app.route('/chat', methods=['POST'])
@limiter.limit("30 per minute")
async def chat_endpoint():
    data = request.get_json(silent=True) or {}
    mode = data.get('mode', 'general')
    message = data.get('message')

    if mode not in CHAT_MODES:
        return jsonify({"error": f"Unknown chat mode '{mode}'."}), 400
    if not message or not isinstance(message, str) or not message.strip():
        return jsonify({"error": "Missing or empty 'message'."}), 400
    if mode == 'name_validation' and not (data.get('target_name') and isinstance(data.get('client_profile'), dict)):
        return jsonify({"error": "Name validation chat needs 'target_name' and 'client_profile'."}), 400

    try:
        messages = build_chat_messages(
            mode,
            message,
            client_profile=data.get('client_profile'),
            target_name=data.get('target_name'),
            history=data.get('history') or [],
            window=settings.chat_history_window,
        )
        response_text = await generate_chat_response(get_llm_manager().llm, messages)
        return jsonify({"response": response_text}), 200

    except LLMUnavailableError:
        raise
    except Exception as e:
        logger.error(f"Error in chat: {e}", exc_info=True)
        return jsonify({"error": "The assistant could not answer right now. Please try again later."}), 500


# Error handlers
@app.errorhandler(LLMUnavailableError)
def llm_unavailable(error):
    logger.error(f"LLM unavailable: {error}")
    return jsonify({"error": f"Service Unavailable: {error}"}), 503


@app.errorhandler(400)
def bad_request(error):
    logger.error(f"Bad Request: {error}")
    return jsonify({"error": "Bad Request: " + str(error.description)}), 400


@app.errorhandler(404)
def not_found(error):
    logger.error(f"Not Found: {error}")
    return jsonify({"error": "Not Found: The requested URL was not found on the server."}), 404


@app.errorhandler(429)
def rate_limited(error):
    logger.warning(f"Rate limit exceeded: {error}")
    return jsonify({"error": f"Too Many Requests: {error.description}"}), 429


@app.errorhandler(500)
def internal_server_error(error):
    logger.error(f"Internal Server Error: {error}", exc_info=True)
    return jsonify({"error": "Internal Server Error: The server encountered an internal error and was unable to complete your request. Please try again later."}), 500


# This is the ASGI application that Uvicorn serves:
#   uvicorn app:asgi_app --host 0.0.0.0 --port 8000
asgi_app = WSGIMiddleware(app)

if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=settings.port)
