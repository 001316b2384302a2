# template.py
# SPDX-License-Identifier: MIT
"""Offset-based placeholder substitution for canonical license text.

Spans are defined against the *original* text, so they are applied from the
rightmost start offset to the leftmost. Each splice then leaves the offsets of
the spans still pending untouched.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from .catalog import LicenseDescriptor, Replacement
from .errors import TemplateError
from .log import get_logger

__all__ = ["FieldValues", "fill", "fill_license", "check_field_values"]

log = get_logger(__name__)

FieldValues = Mapping[str, str]


def fill(text: str, spans: Iterable[Replacement], values: FieldValues) -> str:
    """Replace every span of ``text`` with the value of its field.

    Args:
        text (str): Canonical license text.
        spans (Iterable[Replacement]): Non-overlapping ``[start, end)`` spans.
        values (FieldValues): Field name to non-empty replacement value.
            Extra keys are ignored.

    Returns:
        str: Filled text; ``text`` itself when there are no spans.

    Raises:
        TemplateError: On a missing or empty value, a span outside
            ``[0, len(text)]``, or overlapping spans. Nothing is returned
            partially filled.
    """
    ordered = sorted(spans, key=lambda span: (span.start, span.end), reverse=True)
    if not ordered:
        return text

    _check_spans(ordered, len(text))

    result = text
    for span in ordered:
        value = values.get(span.field)
        if not value:
            raise TemplateError(f"Missing value for {span.field}.")
        result = result[: span.start] + value + result[span.end :]
    return result


def _check_spans(ordered: Sequence[Replacement], length: int) -> None:
    """Validate bounds and overlap of spans sorted by descending start."""
    next_start = None
    for span in ordered:
        if span.start < 0 or span.end > length or span.start > span.end:
            raise TemplateError(
                f"Replacement offsets out of range for {span.field}: "
                f"[{span.start}, {span.end}) in text of length {length}."
            )
        if next_start is not None and span.end > next_start:
            raise TemplateError(f"Replacement for {span.field} overlaps another replacement.")
        next_start = span.start


def check_field_values(descriptor: LicenseDescriptor, values: FieldValues) -> dict[str, str]:
    """Return the declared fields of ``descriptor`` picked out of ``values``.

    Raises:
        TemplateError: If any field declared in ``template.fields`` has no
            non-empty value.
    """
    missing = [f for f in descriptor.required_fields if not (values.get(f) or "").strip()]
    if missing:
        raise TemplateError(f"Missing required fields for {descriptor.spdx}: {', '.join(missing)}.")
    return {f: values[f] for f in descriptor.required_fields}


def fill_license(descriptor: LicenseDescriptor, text: str, values: FieldValues) -> str:
    """Fill ``text`` using the template declared by ``descriptor``."""
    checked = check_field_values(descriptor, values)
    try:
        filled = fill(text, descriptor.replacements, checked)
    except TemplateError as exc:
        raise TemplateError(f"{descriptor.spdx}: {exc}") from exc
    log.debug("Filled %d span(s) for %s", len(descriptor.replacements), descriptor.spdx)
    return filled
