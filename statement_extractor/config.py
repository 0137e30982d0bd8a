"""Runtime configuration read from the environment (and an optional .env file)."""
import os
import logging
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}


@dataclass
class ExtractorConfig:
    min_text_length: int = 200
    ocr_page_limit: int = 2
    ocr_resolution: int = 144  # 2x the 72 dpi PDF user space
    ocr_language: str = 'eng'
    tesseract_cmd: Optional[str] = None
    profile: str = 'standard'
    parser: str = 'auto'
    log_level: str = 'INFO'
    log_dir: Optional[str] = None
    debug: bool = False
    max_upload_mb: int = 16


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid integer for {name}: {raw!r} (using {default})")
        return default


def load_config(dotenv_path: Optional[str] = None) -> ExtractorConfig:
    """Build an ExtractorConfig from environment variables.

    Variables from ``dotenv_path`` (or a .env file found from the working
    directory) are loaded first without overriding the real environment.
    """
    load_dotenv(dotenv_path)

    profile = os.environ.get('STATEMENT_PROFILE', 'standard').strip().lower()
    if profile not in ('standard', 'loose'):
        logger.warning(f"Unknown STATEMENT_PROFILE {profile!r}, falling back to 'standard'")
        profile = 'standard'

    parser = os.environ.get('STATEMENT_PARSER', 'auto').strip().lower()
    if parser not in ('auto', 'kotak', 'generic'):
        logger.warning(f"Unknown STATEMENT_PARSER {parser!r}, falling back to 'auto'")
        parser = 'auto'

    return ExtractorConfig(
        min_text_length=_env_int('STATEMENT_MIN_TEXT_LENGTH', 200),
        ocr_page_limit=_env_int('STATEMENT_OCR_PAGE_LIMIT', 2),
        ocr_resolution=_env_int('STATEMENT_OCR_RESOLUTION', 144),
        ocr_language=os.environ.get('STATEMENT_OCR_LANGUAGE', 'eng'),
        tesseract_cmd=os.environ.get('TESSERACT_CMD') or None,
        profile=profile,
        parser=parser,
        log_level=os.environ.get('STATEMENT_LOG_LEVEL', 'INFO').upper(),
        log_dir=os.environ.get('STATEMENT_LOG_DIR') or None,
        debug=os.environ.get('STATEMENT_DEBUG', '').strip().lower() in _TRUE_VALUES,
        max_upload_mb=_env_int('MAX_UPLOAD_MB', 16),
    )
