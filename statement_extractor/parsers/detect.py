"""Template detection for statement text.

Decides whether a statement carries a known fixed layout (currently Kotak
Mahindra Bank) or should go through the generic heuristic parser.
"""
import re
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from .kotak import is_kotak_statement

logger = logging.getLogger(__name__)


@dataclass
class TemplateInfo:
    """Information about a detected template."""
    template_key: str
    confidence: float  # 0.0 to 1.0
    features: List[str] = field(default_factory=list)
    suggested_parser: str = 'generic'


class BankTemplateDetector:
    """Scores statement text against the known layouts."""

    def __init__(self):
        self.templates: Dict[str, Dict[str, List[str]]] = {
            'kotak': {
                'keywords': [
                    r'kotak\s+mahindra\s+bank',
                    r'kkbk\d+',
                ],
                'header_fields': [
                    r'account\s+no\s*:',
                    r'period\s*:',
                    r'opening\s+balance\s*:',
                    r'closing\s+balance\s*:',
                    r'withdrawal\s+count\s*:',
                ],
                'formatting': [
                    r'\(dr\)',
                    r'\(cr\)',
                ],
            },
        }

    def detect_template(self, text: str) -> TemplateInfo:
        """
        Detect the best template for the given statement text.

        The Kotak layout is only chosen when its marker is present; the
        remaining features only raise the confidence.
        """
        if not text or not is_kotak_statement(text):
            return self._get_generic_template()

        score, features = self._analyze_template(text.lower(), self.templates['kotak'])
        features.insert(0, 'kotak_marker')
        return TemplateInfo(
            template_key='kotak',
            confidence=min(0.6 + score, 1.0),
            features=features,
            suggested_parser='kotak',
        )

    def _analyze_template(self, normalized_text: str, template_config: Dict[str, List[str]]) -> Tuple[float, List[str]]:
        """Weighted share of keyword (15%), header field (20%) and formatting (5%) hits."""
        score = 0.0
        features = []

        keyword_hits = [p for p in template_config['keywords'] if re.search(p, normalized_text)]
        if keyword_hits:
            features.append('keyword_match')
        score += 0.15 * len(keyword_hits) / len(template_config['keywords'])

        header_hits = [p for p in template_config['header_fields'] if re.search(p, normalized_text)]
        if header_hits:
            features.append(f"header_fields_{len(header_hits)}")
        score += 0.2 * len(header_hits) / len(template_config['header_fields'])

        if any(re.search(p, normalized_text) for p in template_config['formatting']):
            features.append('formatting_match')
            score += 0.05

        return score, features

    def _get_generic_template(self) -> TemplateInfo:
        return TemplateInfo(
            template_key='generic',
            confidence=0.3,
            features=['fallback_detection'],
            suggested_parser='generic',
        )


def detect_template(text: str) -> TemplateInfo:
    detector = BankTemplateDetector()
    template_info = detector.detect_template(text)
    logger.debug(f"Template detected: {template_info.template_key} (confidence: {template_info.confidence:.2f})")
    return template_info
