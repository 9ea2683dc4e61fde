"""Context Layers

Intent-gated evidence sources for the answer generator. Product identity is
always available; everything else is enabled by the intent.
"""

from typing import Dict, Optional

from backend.app.decision_layer.models import ContextLayerMetadata, ContextLayers, Intent

INTENT_LAYER: Dict[Intent, Optional[str]] = {
    Intent.SINGLE_MEETING: "single_meeting",
    Intent.MULTI_MEETING: "multi_meeting",
    Intent.PRODUCT_KNOWLEDGE: "product_ssot",
    Intent.EXTERNAL_RESEARCH: "product_ssot",
    Intent.DOCUMENT_SEARCH: "document_context",
    Intent.SLACK_SEARCH: "slack_search",
    Intent.GENERAL_HELP: None,
    Intent.CLARIFY: None,
    Intent.REFUSE: None,
}


def compute_context_layers(intent: Intent) -> ContextLayerMetadata:
    layer = INTENT_LAYER.get(intent)
    reasons = ["product_identity always enabled."]

    if layer is None:
        layers = ContextLayers()
    else:
        layers = ContextLayers(**{layer: True})
        reasons.append(f"{layer} enabled for {intent.value} intent.")

    return ContextLayerMetadata(layers=layers, reason=" ".join(reasons), intent=intent)
