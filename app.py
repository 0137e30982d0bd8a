# app.py - HTTP API for statement and SMS extraction

from flask import Flask, request, jsonify
from datetime import datetime
import logging

from statement_extractor.config import ExtractorConfig, load_config
from statement_extractor.errors import TextServiceUnavailableError
from statement_extractor.extractor import StatementExtractor
from statement_extractor.log_config import configure_logging
from statement_extractor.parsers.router import PARSER_CHOICES
from statement_extractor.sms import parse_sms

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {'pdf'}


def allowed_file(filename):
    """Check if the file extension is allowed."""
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def _get_param(key, default=None):
    # Form fields and JSON bodies are both accepted
    if request.is_json:
        data = request.get_json(silent=True) or {}
        return data.get(key, default)
    return request.form.get(key, default)


def create_app(config: ExtractorConfig = None, text_service=None) -> Flask:
    """Build the Flask app. ``text_service`` replaces the PDF/OCR backend (used by tests)."""
    config = config or load_config()
    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = config.max_upload_mb * 1024 * 1024
    app.config['EXTRACTOR'] = StatementExtractor(config=config, text_service=text_service)

    # --- Health Check Endpoint ---
    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'timestamp': datetime.utcnow().isoformat(),
            'service': 'Statement Extractor',
            'version': '1.0.0'
        }), 200

    @app.route('/api/statements/extract', methods=['POST'])
    def extract_statement():
        """Extract transactions from an uploaded PDF (``file``) or from statement ``text``."""
        extractor = app.config['EXTRACTOR']
        parser = _get_param('parser') or None
        if parser is not None and parser not in PARSER_CHOICES:
            return jsonify({'error': f"Unknown parser '{parser}'. Choose from {', '.join(PARSER_CHOICES)}"}), 400

        try:
            if 'file' in request.files:
                uploaded = request.files['file']
                if uploaded.filename == '':
                    return jsonify({'error': 'No file provided'}), 400
                if not allowed_file(uploaded.filename):
                    return jsonify({'error': 'Only PDF files are allowed'}), 400
                password = _get_param('password') or None
                logger.info(f"API: extracting uploaded file {uploaded.filename}")
                result = extractor.extract_from_bytes(uploaded.read(), password=password, parser=parser)
            else:
                text = _get_param('text')
                if not text or not str(text).strip():
                    return jsonify({'error': 'No file or text provided. Send multipart/form-data with file '
                                             'or a text field'}), 400
                logger.info(f"API: extracting from {len(text)} characters of text")
                result = extractor.extract_from_text(str(text), parser=parser)
        except TextServiceUnavailableError as e:
            logger.error(f"API: text service unavailable: {e}")
            return jsonify({'error': str(e)}), 503

        return jsonify(result.to_dict()), 200

    @app.route('/api/sms/parse', methods=['POST'])
    def parse_sms_message():
        message = _get_param('message')
        if not message or not str(message).strip():
            return jsonify({'error': 'message is required'}), 400

        transaction = parse_sms(str(message))
        if transaction is None:
            return jsonify({'success': False, 'message': 'Not a recognised transaction alert', 'transaction': None}), 200
        return jsonify({'success': True, 'message': 'Transaction parsed', 'transaction': transaction.to_dict()}), 200

    @app.errorhandler(413)
    def too_large(e):
        return jsonify({'error': f"File too large. Maximum upload size is {config.max_upload_mb} MB"}), 413

    return app


# Main execution block
if __name__ == '__main__':
    # For production, use a proper WSGI server like Gunicorn or Waitress
    # Example: gunicorn -w 4 'app:create_app()'
    settings = load_config()
    configure_logging(settings.log_level, settings.log_dir, debug=settings.debug)
    create_app(settings).run(debug=settings.debug, port=5000)
