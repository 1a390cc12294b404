from typing import Any, List, Mapping
from urllib.parse import urlparse

from markcrawl.domain.job import (
    MAX_CONCURRENT_RANGE,
    MAX_DEPTH_RANGE,
    REQUEST_DELAY_MS_RANGE,
    CrawlJobConfig,
)
from markcrawl.exceptions import JobValidationError
from markcrawl.services.pattern_matcher import validate_pattern

_DEFAULTS = CrawlJobConfig(base_url="", pattern_rules=())

_KNOWN_FIELDS = frozenset({
    "base_url",
    "pattern_rules",
    "max_depth",
    "request_delay_ms",
    "max_concurrent",
    "remove_navigation",
    "clean_formatting",
    "include_images",
})


class JobConfigParser:
    """Validate a submitted job definition and build a `CrawlJobConfig`.

    Responsibility: schema/validation only. Used by both the HTTP API and
    the YAML-driven CLI. Every problem is collected, then reported together
    in one `JobValidationError`.
    """

    def parse(self, data: Mapping[str, Any]) -> CrawlJobConfig:
        if not isinstance(data, Mapping):
            raise JobValidationError(["job definition must be a mapping"])

        errors: List[str] = []
        unknown = sorted(set(data) - _KNOWN_FIELDS)
        if unknown:
            errors.append(f"unknown fields: {', '.join(unknown)}")

        base_url = self._parse_base_url(data.get("base_url"), errors)
        pattern_rules = self._parse_patterns(data.get("pattern_rules"), errors)
        max_depth = self._parse_int(data, "max_depth", _DEFAULTS.max_depth, MAX_DEPTH_RANGE, errors)
        request_delay_ms = self._parse_int(
            data, "request_delay_ms", _DEFAULTS.request_delay_ms, REQUEST_DELAY_MS_RANGE, errors
        )
        max_concurrent = self._parse_int(data, "max_concurrent", _DEFAULTS.max_concurrent, MAX_CONCURRENT_RANGE, errors)
        remove_navigation = self._parse_bool(data, "remove_navigation", _DEFAULTS.remove_navigation, errors)
        clean_formatting = self._parse_bool(data, "clean_formatting", _DEFAULTS.clean_formatting, errors)
        include_images = self._parse_bool(data, "include_images", _DEFAULTS.include_images, errors)

        if errors:
            raise JobValidationError(errors)

        return CrawlJobConfig(
            base_url=base_url,
            pattern_rules=tuple(pattern_rules),
            max_depth=max_depth,
            request_delay_ms=request_delay_ms,
            max_concurrent=max_concurrent,
            remove_navigation=remove_navigation,
            clean_formatting=clean_formatting,
            include_images=include_images,
        )

    @staticmethod
    def _parse_base_url(value, errors: List[str]) -> str:
        if not isinstance(value, str) or not value.strip():
            errors.append("base_url is required")
            return ""
        value = value.strip()
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            errors.append(f"base_url must be an absolute http(s) URL: {value!r}")
        return value

    @staticmethod
    def _parse_patterns(value, errors: List[str]) -> List[str]:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)) or not value:
            errors.append("pattern_rules must contain at least one pattern")
            return []
        patterns = []
        for i, pattern in enumerate(value):
            if not isinstance(pattern, str) or not pattern.strip():
                errors.append(f"pattern_rules[{i}] must be a non-empty string")
                continue
            valid, message = validate_pattern(pattern)
            if not valid:
                errors.append(f"pattern_rules[{i}] is not a valid regular expression: {message}")
                continue
            patterns.append(pattern)
        return patterns

    @staticmethod
    def _parse_int(data: Mapping[str, Any], name: str, default: int, bounds: tuple, errors: List[str]) -> int:
        value = data.get(name)
        if value is None:
            return default
        # bool is an int subclass; True is not a depth
        if isinstance(value, bool) or not isinstance(value, int):
            errors.append(f"{name} must be an integer")
            return default
        low, high = bounds
        if not low <= value <= high:
            errors.append(f"{name} must be between {low} and {high}")
        return value

    @staticmethod
    def _parse_bool(data: Mapping[str, Any], name: str, default: bool, errors: List[str]) -> bool:
        value = data.get(name)
        if value is None:
            return default
        if not isinstance(value, bool):
            errors.append(f"{name} must be a boolean")
            return default
        return value
