"""Lightweight i18n layer, no external dependencies.

Usage::

    from i18n import t, set_locale

    set_locale("zh_CN")
    print(t("exc.kind_mismatch"))

    # shorthand alias
    from i18n import _
    print(_("cli.listening", address="ws://127.0.0.1:9000"))
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

_FALLBACK_LOCALE = "en_US"

_locale: str = _FALLBACK_LOCALE
_tables: dict[str, dict[str, str]] = {}


def _load_table(locale: str) -> dict[str, str]:
    """Load a translation table on demand."""
    if locale == "en_US":
        from .en_US import STRINGS
    elif locale == "zh_CN":
        from .zh_CN import STRINGS
    else:
        raise ValueError(f"Unsupported locale: {locale}")
    return STRINGS


def set_locale(locale: str) -> None:
    """Switch the current locale."""
    global _locale
    # preload so an unknown locale fails here rather than on first lookup
    if locale not in _tables:
        _tables[locale] = _load_table(locale)
    _locale = locale


def get_locale() -> str:
    return _locale


def get_available_locales() -> list[str]:
    return ["en_US", "zh_CN"]


def t(key: str, **kwargs: object) -> str:
    """Translate ``key`` in the current locale.

    Missing keys fall back to en_US; still missing returns ``[key]``.

    Args:
        key: translation key such as ``"exc.invalid_envelope"``.
        **kwargs: ``str.format`` arguments for the template.
    """
    if _locale not in _tables:
        _tables[_locale] = _load_table(_locale)

    template = _tables[_locale].get(key)

    if template is None and _locale != _FALLBACK_LOCALE:
        if _FALLBACK_LOCALE not in _tables:
            _tables[_FALLBACK_LOCALE] = _load_table(_FALLBACK_LOCALE)
        template = _tables[_FALLBACK_LOCALE].get(key)
        if template is not None:
            logger.debug("i18n fallback: '%s' not in %s, using %s", key, _locale, _FALLBACK_LOCALE)

    if template is None:
        logger.warning("i18n missing key: '%s' (lang=%s)", key, _locale)
        return f"[{key}]"

    if kwargs:
        try:
            return template.format_map(kwargs)
        except KeyError as e:
            logger.warning("i18n format error: key='%s', missing=%s", key, e)
            return template
    return template


_ = t
