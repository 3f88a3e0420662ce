"""
Contact Flow Documents
======================
Pure helpers for the flow payloads exchanged with the Connect web API:
ARN parsing, export normalisation, edit-token scraping and upload bodies.

Nothing here does I/O — ``client.FlowClient`` feeds responses in and sends
the results out.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

# Embedded in the flow edit page as an AngularJS constant
_EDIT_TOKEN_RE = re.compile(r'app\.constant\("token", "(.+)"\)')

FLOW_STATUS_PUBLISHED = "published"
FLOW_STATUS_SAVED = "saved"


# ---------------------------------------------------------------------------
# ARN
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FlowArn:
    """A contact-flow ARN split into the parts the edit API wants.

    ``arn:aws:connect:<region>:<account>:instance/<instance-id>/contact-flow/<flow-id>``
    """
    arn: str
    organization: str
    instance_id: str
    flow_id: str

    @classmethod
    def parse(cls, arn: str) -> "FlowArn":
        parts = arn.split("/")
        if len(parts) != 4 or not parts[0].startswith("arn:") or parts[2] != "contact-flow":
            raise ValueError(f"not a contact-flow ARN: {arn!r}")
        prefix, instance_id, _, flow_id = parts
        return cls(
            arn=arn,
            organization=f"{prefix}/{instance_id}",
            instance_id=instance_id,
            flow_id=flow_id,
        )


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

def merge_metadata(metadata: Any) -> Any:
    """Collapse a list of single-key mappings into one mapping.

    ``[{"a": 1}, {"b": 2}]`` → ``{"a": 1, "b": 2}``; later keys win.
    Anything that is not a list is returned unchanged.
    """
    if isinstance(metadata, list):
        merged: Dict[str, Any] = {}
        for entry in metadata:
            merged.update(entry)
        return merged
    return metadata


def normalize_exported_flow(
    exported: Dict[str, Any],
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    flow_type: Optional[str] = None,
) -> Dict[str, Any]:
    """Turn one element of the export response into a flow document.

    ``contactFlowContent`` is itself a JSON string; its ``metadata`` is
    normalised to a mapping and stamped with the exported status plus any
    caller-supplied name / description / type.

    Raises:
        json.JSONDecodeError: ``contactFlowContent`` is not valid JSON.
        TypeError:            ``metadata`` is not a mapping after merging.
    """
    flow = json.loads(exported["contactFlowContent"])
    metadata = merge_metadata(flow.get("metadata"))
    if not isinstance(metadata, dict):
        raise TypeError(
            f"flow metadata must be a mapping, got {type(metadata).__name__}"
        )

    metadata["status"] = exported.get("contactFlowStatus")
    if name is not None:
        metadata["name"] = name
    if description is not None:
        metadata["description"] = description
    if flow_type is not None:
        metadata["type"] = flow_type

    flow["metadata"] = metadata
    return flow


# ---------------------------------------------------------------------------
# Edit
# ---------------------------------------------------------------------------

def extract_edit_token(html: str) -> Optional[str]:
    """Return the edit token embedded in the flow edit page, or None."""
    match = _EDIT_TOKEN_RE.search(html)
    return match.group(1) if match else None


def build_upload_payload(arn: str, flow_content: str, *, publish: bool = False) -> Dict[str, Any]:
    """Build the JSON body for the flow edit submission.

    Args:
        arn:          Contact-flow ARN.
        flow_content: Serialized flow document (as produced by ``get_flow``).
        publish:      Publish immediately instead of saving a draft.
    """
    parsed = FlowArn.parse(arn)
    metadata = merge_metadata(json.loads(flow_content).get("metadata")) or {}

    return {
        "arn": arn,
        "resourceArn": arn,
        "resourceId": parsed.flow_id,
        "organization": parsed.organization,
        "organizationArn": parsed.organization,
        "organizationResourceId": parsed.instance_id,
        "contactFlowType": metadata.get("type"),
        "contactFlowContent": flow_content,
        "contactFlowStatus": FLOW_STATUS_PUBLISHED if publish else FLOW_STATUS_SAVED,
        "name": metadata.get("name"),
        "description": metadata.get("description"),
        "isDefault": False,
    }
