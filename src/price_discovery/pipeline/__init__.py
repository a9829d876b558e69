from __future__ import annotations

from .context import PipelineContext
from .inputs import load_inputs
from .pricing import price_tokens
from .run import run_pricing

__all__ = ["PipelineContext", "load_inputs", "price_tokens", "run_pricing"]
