"""Parser for Stable Diffusion generation parameters text.

The text embedded by the common web UIs looks like::

    a photo of a cat, masterpiece
    Negative prompt: blurry, lowres
    Steps: 20, Sampler: Euler a, CFG scale: 7, Seed: 1234, Size: 512x768

The last line is a comma separated list of ``key: value`` pairs. Values may be
double-quoted (and then contain commas) or wrapped in braces. Everything above
that line is the prompt, optionally followed by a ``Negative prompt:`` section.
"""

import json
import logging
import re
from typing import Iterator, List, Optional, Tuple, Union

from ..models.generation_params import GenerationParameters

logger = logging.getLogger(__name__)

# Longest input accepted, longer text is truncated
MAX_INPUT_SIZE = 32 * 1024

# Capacity of the unknown parameters list; one slot is reserved,
# so at most MAX_UNKNOWNS - 1 pairs are kept
MAX_UNKNOWNS = 64

NEGATIVE_PROMPT_MARKER = "Negative prompt:"

# Known keys -> attribute path in GenerationParameters
FIELD_TABLE = {
    "Prompt": "prompt",
    "Negative prompt": "negative_prompt",
    "Wildcard prompt": "wildcard_prompt",
    "Model": "model.name",
    "Model hash": "model.hash",
    "Sampler": "sampler",
    "Steps": "steps",
    "CFG scale": "cfg_scale",
    "Seed": "seed",
    "Denoising strength": "denoising",
    "Hires upscaler": "hires.upscaler",
    "Hires steps": "hires.steps",
    "Hires upscale": "hires.upscale",
    "Mask blur": "inpaint.mask_blur",
    "Eta": "settings.eta",
    "ENSD": "settings.ensd",
    "Clip skip": "settings.clip_skip",
}

# Compound "<width>x<height>" keys -> (width path, height path)
SIZE_TABLE = {
    "Size": ("width", "height"),
    "Hires resize": ("hires.width", "hires.height"),
}

_TRIMMABLE = "".join(chr(i) for i in range(0x21))
_NEGATIVE_RE = re.compile(r"^" + re.escape(NEGATIVE_PROMPT_MARKER), re.MULTILINE)
_LEADING_NUMBER_RE = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")


def _trim(text: str) -> str:
    return text.strip(_TRIMMABLE)


def _present(text: str) -> Optional[str]:
    """Trimmed text, or None when nothing is left."""
    text = _trim(text)
    return text or None


def _is_key_char(ch: str) -> bool:
    return ch == " " or (ch.isascii() and ch.isalnum())


def _to_float(value: Optional[str]) -> float:
    """Leading number of ``value`` as float, 0.0 when missing or unparseable."""
    if not value:
        return 0.0
    match = _LEADING_NUMBER_RE.match(value)
    if not match:
        return 0.0
    try:
        return float(match.group(1))
    except ValueError:
        return 0.0


def _set_field(record: GenerationParameters, path: str, value: Optional[str]) -> None:
    target = record
    *parents, name = path.split(".")
    for parent in parents:
        target = getattr(target, parent)
    setattr(target, name, value)


def _unquote(value: str) -> str:
    """Remove enclosing double quotes, decoding JSON escapes when possible."""
    if len(value) < 2 or value[0] != '"' or value[-1] != '"':
        return value
    try:
        decoded = json.loads(value)
    except ValueError:
        return _trim(value[1:-1])
    return _trim(decoded) if isinstance(decoded, str) else value


def _find_closing_quote(line: str, pos: int) -> int:
    """Index of the quote closing a string whose body starts at ``pos``."""
    n = len(line)
    while pos < n:
        ch = line[pos]
        if ch == "\\":
            pos += 2
            continue
        if ch == '"':
            return pos
        pos += 1
    return -1


def _find_closing_brace(line: str, pos: int) -> int:
    """Index of the brace matching the ``{`` at ``pos``."""
    n = len(line)
    depth = 0
    while pos < n:
        ch = line[pos]
        if ch == '"':
            pos = _find_closing_quote(line, pos + 1)
            if pos < 0:
                return -1
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return pos
        pos += 1
    return -1


def _find_separator(line: str, pos: int) -> int:
    """
    Index of the next comma not escaped by a backslash, -1 if none.

    A comma is escaped only by an odd run of backslashes; ``\\\\,`` is an
    escaped backslash followed by a separator.
    """
    while True:
        idx = line.find(",", pos)
        if idx < 0:
            return idx
        slashes = 0
        while idx - slashes > pos and line[idx - slashes - 1] == "\\":
            slashes += 1
        if slashes % 2 == 0:
            return idx
        pos = idx + 1


def _next_param(line: str, pos: int) -> Optional[Tuple[str, str, int]]:
    """
    Read one ``key: value`` token starting at ``pos``.

    Returns (key, value, position after the separator), or None when the
    token is malformed: no ':' after the key, no value on the line, or an
    unterminated quote/brace.
    """
    n = len(line)
    start = pos
    while pos < n and _is_key_char(line[pos]):
        pos += 1
    if pos >= n or line[pos] != ":":
        return None
    key_end = pos
    pos += 1
    while pos < n and line[pos] in " \t":
        pos += 1
    if pos >= n or line[pos] == "\n":
        return None

    opening = line[pos]
    if opening in '"{':
        if opening == '"':
            close = _find_closing_quote(line, pos + 1)
        else:
            close = _find_closing_brace(line, pos)
        if close < 0:
            return None
        end = line.find(",", close + 1)
    else:
        end = _find_separator(line, pos)
    if end < 0:
        end = n

    key = _trim(line[start:key_end])
    value = _trim(line[key_end + 1:end])
    if opening == '"':
        value = _unquote(value)
    return key, value, min(end + 1, n)


def _iter_params(line: str) -> Iterator[Tuple[str, str]]:
    pos = 0
    while pos < len(line):
        token = _next_param(line, pos)
        if token is None:
            return
        key, value, pos = token
        yield key, value


def tokenize_parameter_line(line: str) -> List[Tuple[str, str]]:
    """
    Split a parameter line into trimmed (key, value) pairs.

    Pairs with an empty key or value are skipped. Tokenizing stops silently
    at the first malformed token; the pairs read before it are returned.
    """
    return [(key, value) for key, value in _iter_params(line) if key and value]


def find_parameter_line(text: str) -> Optional[int]:
    """
    Offset where the trailing parameter line starts, or None if the text has
    no line holding at least two ``key: value`` parameters.
    """
    if not text or text == "\n":
        return None
    start = text.rfind("\n", 0, len(text) - 1) + 1
    params = _iter_params(text[start:])
    if next(params, None) is None or next(params, None) is None:
        return None
    return start


class ParameterParser:
    """Parser for generation parameters text. Stateless between calls."""

    def __init__(self, max_input_size: int = MAX_INPUT_SIZE, max_unknowns: int = MAX_UNKNOWNS):
        self.max_input_size = max_input_size
        self.max_unknowns = max_unknowns

    def parse(self, text: Union[str, bytes, None]) -> GenerationParameters:
        """
        Parse generation parameters text into a GenerationParameters record.

        Never raises on malformed text: unrecognized content yields an empty
        (or partially filled) record.

        Args:
            text: Raw parameters text, as str or as bytes (decoded as UTF-8)

        Returns:
            A new GenerationParameters record
        """
        record = GenerationParameters()
        text = self._bounded_text(text)
        if not text:
            return record

        prompt_region, parameter_line = self._split_parameter_line(text)
        prompt, negative = self._split_prompts(prompt_region)
        record.prompt = prompt
        record.negative_prompt = negative

        if parameter_line is not None:
            for key, value in tokenize_parameter_line(parameter_line):
                self._assign(record, key, value)

        self._finalize(record)
        return record

    def _bounded_text(self, text: Union[str, bytes, None]) -> str:
        if text is None:
            return ""
        if isinstance(text, (bytes, bytearray, memoryview)):
            data = bytes(text[:self.max_input_size])
            if len(text) > self.max_input_size:
                logger.debug(f"Parameters text truncated to {self.max_input_size} bytes")
            return data.decode("utf-8", errors="ignore")
        if len(text) > self.max_input_size:
            logger.debug(f"Parameters text truncated to {self.max_input_size} characters")
        return text[:self.max_input_size]

    def _split_parameter_line(self, text: str) -> Tuple[str, Optional[str]]:
        """Split text into (prompt region, parameter line or None)."""
        start = find_parameter_line(text)
        if start is None:
            return text, None
        return text[:max(start - 1, 0)], text[start:]

    def _split_prompts(self, region: str) -> Tuple[Optional[str], Optional[str]]:
        """Split the prompt region into (prompt, negative prompt)."""
        match = _NEGATIVE_RE.search(region)
        if not match:
            return _present(region), None
        return _present(region[:match.start()]), _present(region[match.end():])

    def _assign(self, record: GenerationParameters, key: str, value: str) -> None:
        """Store one parameter in its field, or in the unknowns list."""
        path = FIELD_TABLE.get(key)
        if path is not None:
            _set_field(record, path, value)
            return

        size_paths = SIZE_TABLE.get(key)
        if size_paths is not None:
            width, height = self._split_size(value)
            _set_field(record, size_paths[0], width)
            _set_field(record, size_paths[1], height)
            return

        if len(record.unknowns) < self.max_unknowns - 1:
            record.unknowns.append((key, value))
        else:
            logger.debug(f"Unknown parameter dropped, list is full: {key}")

    def _split_size(self, value: str) -> Tuple[Optional[str], Optional[str]]:
        """Split "<digits><separator><rest>" into (width, height)."""
        i = 0
        while i < len(value) and "0" <= value[i] <= "9":
            i += 1
        return _present(value[:i]), _present(value[i + 1:])

    def _finalize(self, record: GenerationParameters) -> None:
        """Compute group flags, attribute denoising and derive hires dimensions."""
        model, hires = record.model, record.hires
        inpaint, settings = record.inpaint, record.settings

        model.has_info = model.name is not None or model.hash is not None
        hires.has_info = any(value is not None for value in (
            hires.upscaler, hires.steps, hires.upscale, hires.width, hires.height))
        inpaint.has_info = inpaint.mask_blur is not None
        settings.has_info = any(value is not None for value in (
            settings.eta, settings.ensd, settings.clip_skip))

        if record.denoising is not None:
            if inpaint.has_info:
                inpaint.denoising = record.denoising
                record.denoising = None
            elif hires.has_info:
                hires.denoising = record.denoising
                record.denoising = None

        width = _to_float(record.width)
        height = _to_float(record.height)
        hr_width = _to_float(hires.width)
        hr_height = _to_float(hires.height)
        hr_upscale = _to_float(hires.upscale)

        if hr_width == 0:
            hires.calc_width = width * hr_upscale
        if hr_height == 0:
            hires.calc_height = height * hr_upscale
        if hr_upscale == 0:
            ratios = []
            if hr_width > 0 and width > 0:
                ratios.append(hr_width / width)
            if hr_height > 0 and height > 0:
                ratios.append(hr_height / height)
            if ratios:
                hires.calc_upscale = sum(ratios) / len(ratios)


def parse_generation_parameters(text: Union[str, bytes, None],
                                max_input_size: int = MAX_INPUT_SIZE,
                                max_unknowns: int = MAX_UNKNOWNS) -> GenerationParameters:
    """
    Convenience function to parse generation parameters text.

    Args:
        text: Raw parameters text
        max_input_size: Longest input accepted before truncation
        max_unknowns: Capacity of the unknown parameters list

    Returns:
        GenerationParameters with the recognized fields
    """
    parser = ParameterParser(max_input_size=max_input_size, max_unknowns=max_unknowns)
    return parser.parse(text)
