"""
Context files: a ResolutionContext and predicates stored as YAML.

    layers:
      reservation:
        reservationCode: R-1042
      property:
        propertyCode: APT-7
    predicates:
      billingTypeMonthly: true

Layers apply in file order. Values are read as strings; null becomes "".
"""

from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from omegaconf import OmegaConf

from rentdocs.contexts.templating.resolution_context import ResolutionContext


def load_context_file(
    context_file: Optional[Union[str, Path]],
) -> Tuple[ResolutionContext, Dict[str, bool]]:
    """Read layers and predicates from a YAML context file (None gives an empty context)."""
    if context_file is None:
        return ResolutionContext.from_layers([]), {}

    data = OmegaConf.to_container(OmegaConf.load(context_file), resolve=True) or {}
    layers = [
        (name, {key: "" if value is None else str(value) for key, value in (values or {}).items()})
        for name, values in (data.get("layers") or {}).items()
    ]
    predicates = {name: bool(value) for name, value in (data.get("predicates") or {}).items()}
    return ResolutionContext.from_layers(layers), predicates
