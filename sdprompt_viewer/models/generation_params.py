"""Structured record of Stable Diffusion generation parameters."""

import json
from pathlib import Path
from typing import Optional, Dict, Any, List, Tuple
from dataclasses import dataclass, field, asdict


@dataclass
class ModelInfo:
    """Checkpoint used for the generation."""
    name: Optional[str] = None
    hash: Optional[str] = None
    has_info: bool = False


@dataclass
class HiresInfo:
    """Hi-res fix pass parameters.

    The ``calc_*`` values are derived floats, only filled when the matching
    explicit field is missing and enough dimensions are known to compute it.
    A value of 0.0 means "not computed".
    """
    upscaler: Optional[str] = None
    steps: Optional[str] = None
    upscale: Optional[str] = None
    width: Optional[str] = None
    height: Optional[str] = None
    denoising: Optional[str] = None
    calc_upscale: float = 0.0
    calc_width: float = 0.0
    calc_height: float = 0.0
    has_info: bool = False


@dataclass
class InpaintInfo:
    """Inpainting parameters."""
    denoising: Optional[str] = None
    mask_blur: Optional[str] = None
    has_info: bool = False


@dataclass
class OverrideSettings:
    """Sampler/setting overrides (eta, ENSD, clip skip)."""
    eta: Optional[str] = None
    ensd: Optional[str] = None
    clip_skip: Optional[str] = None
    has_info: bool = False


@dataclass
class GenerationParameters:
    """Parameters extracted from an image's embedded generation text.

    Scalar values are kept exactly as written in the source text (trimmed),
    never converted to numbers.
    """

    # Prompts
    prompt: Optional[str] = None
    negative_prompt: Optional[str] = None
    wildcard_prompt: Optional[str] = None

    # Core generation parameters
    sampler: Optional[str] = None
    steps: Optional[str] = None
    cfg_scale: Optional[str] = None
    seed: Optional[str] = None
    width: Optional[str] = None
    height: Optional[str] = None
    denoising: Optional[str] = None

    # Groups
    model: ModelInfo = field(default_factory=ModelInfo)
    hires: HiresInfo = field(default_factory=HiresInfo)
    inpaint: InpaintInfo = field(default_factory=InpaintInfo)
    settings: OverrideSettings = field(default_factory=OverrideSettings)

    # Parameters with keys outside the known table, in order of appearance
    unknowns: List[Tuple[str, str]] = field(default_factory=list)

    def is_empty(self) -> bool:
        """True when nothing at all was recognized in the source text."""
        scalars = (self.prompt, self.negative_prompt, self.wildcard_prompt,
                   self.sampler, self.steps, self.cfg_scale, self.seed,
                   self.width, self.height, self.denoising)
        if any(value is not None for value in scalars):
            return False
        if (self.model.has_info or self.hires.has_info
                or self.inpaint.has_info or self.settings.has_info):
            return False
        return not self.unknowns

    def to_infotext(self) -> str:
        """Serialize the recognized parameters back to ``key: value, ...`` form.

        Prompts are not included. Values containing a comma, colon or newline
        are written as JSON strings.
        """
        denoising = self.denoising or self.inpaint.denoising or self.hires.denoising
        pairs = [
            ("Wildcard prompt", self.wildcard_prompt),
            ("Steps", self.steps),
            ("Sampler", self.sampler),
            ("CFG scale", self.cfg_scale),
            ("Seed", self.seed),
            ("Size", _join_size(self.width, self.height)),
            ("Model hash", self.model.hash),
            ("Model", self.model.name),
            ("Denoising strength", denoising),
            ("Mask blur", self.inpaint.mask_blur),
            ("Eta", self.settings.eta),
            ("ENSD", self.settings.ensd),
            ("Clip skip", self.settings.clip_skip),
            ("Hires upscale", self.hires.upscale),
            ("Hires resize", _join_size(self.hires.width, self.hires.height)),
            ("Hires steps", self.hires.steps),
            ("Hires upscaler", self.hires.upscaler),
        ]
        pairs.extend(self.unknowns)
        return ", ".join(f"{key}: {_quote(value)}" for key, value in pairs if value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON responses."""
        result = asdict(self)
        result['unknowns'] = [[key, value] for key, value in self.unknowns]
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GenerationParameters':
        """Create from a dictionary produced by ``to_dict``."""
        data = dict(data)
        model = ModelInfo(**data.pop('model', {}))
        hires = HiresInfo(**data.pop('hires', {}))
        inpaint = InpaintInfo(**data.pop('inpaint', {}))
        settings = OverrideSettings(**data.pop('settings', {}))
        unknowns = [(key, value) for key, value in data.pop('unknowns', [])]
        return cls(model=model, hires=hires, inpaint=inpaint, settings=settings,
                   unknowns=unknowns, **data)


@dataclass
class ImageParameters:
    """Generation parameters loaded from an image file."""
    path: Path
    raw_text: str
    parameters: GenerationParameters

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": str(self.path),
            "raw_text": self.raw_text,
            "parameters": self.parameters.to_dict(),
        }


def _join_size(width: Optional[str], height: Optional[str]) -> Optional[str]:
    if not width and not height:
        return None
    return f"{width or ''}x{height or ''}"


def _quote(value: str) -> str:
    if "," not in value and "\n" not in value and ":" not in value:
        return value
    return json.dumps(value, ensure_ascii=False)
