# path: route-extract-api/route_extract/services/vision_oracle.py

"""Reads a route off a map screenshot with a Claude vision call.

The model is treated as a black box: it gets the image plus an instruction
describing the JSON it must answer with, and whatever text comes back is
decoded into raw waypoints and route metadata. Nothing here retries; every
upstream failure surfaces as ``OracleError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol
import json
import logging
import re

import anthropic

from route_extract.config import ORACLE_MAX_TOKENS, ORACLE_MODEL, ORACLE_TIMEOUT_S
from route_extract.models.route_models import (
    DEFAULT_CONFIDENCE,
    DEFAULT_LOCATION,
    DEFAULT_ROUTE_NAME,
    RouteMetadata,
)
from route_extract.services.errors import OracleError, OracleResponseError
from route_extract.services.waypoint_validator import finite_float

logger = logging.getLogger(__name__)


DEFAULT_MEDIA_TYPE = "image/jpeg"

KEY_WAYPOINTS_PROMPT = """You are looking at a screenshot of a cycling or running route shown in a map app (Strava, Garmin, Wahoo, Apple Maps, Google Maps or similar).

Trace the highlighted route line from its start marker to its end marker. Note every road change and turn, the road and path names, nearby towns, parks and landmarks, and the map scale. If the route is a loop the end should sit near the start.

Answer with ONLY this JSON object:
{
  "route_name": "Descriptive name",
  "location": "City, State",
  "is_loop": true/false,
  "total_miles_estimate": number,
  "confidence": 0.0-1.0,
  "notes": "What you see in the image",
  "start_point": [latitude, longitude],
  "end_point": [latitude, longitude],
  "key_waypoints": [
    {"lat": number, "lng": number, "label": "road name or description", "elevation_ft": number}
  ],
  "turn_by_turn": ["Start at ...", "Head north on ...", "Turn left onto ...", "..."]
}

Key waypoint rules:
- 15 to 40 waypoints depending on route complexity, in travel order
- one at every turn, road change and named intersection
- one every 1-2 miles on long straight stretches
- each must be a real, identifiable point on a real road, using your geographic knowledge for accurate coordinates

Do not answer with only the start and end points; cover the whole visible route."""

DENSE_WAYPOINTS_PROMPT = """You are looking at a screenshot of a cycling or running route shown in a map app (Strava, Garmin, Wahoo, Apple Maps, Google Maps or similar).

Trace the highlighted route line from its start marker to its end marker and reproduce it as a dense list of coordinates that follows every bend of the line. Use road names, towns and landmarks on the map to place the coordinates accurately, and estimate the elevation in feet at each point.

Answer with ONLY this JSON object:
{
  "route_name": "Descriptive name",
  "location": "City, State",
  "is_loop": true/false,
  "total_miles_estimate": number,
  "confidence": 0.0-1.0,
  "notes": "What you see in the image",
  "waypoints": [[latitude, longitude, elevation_ft], ...]
}

Use 50 to 200 waypoints in travel order, closer together where the route curves."""


@dataclass
class OracleExtraction:
    waypoints: Any
    metadata: RouteMetadata


class VisionOracle(Protocol):
    def extract(self, image_b64: str, media_type: Optional[str] = None) -> OracleExtraction:
        ...


_FENCE_OPEN = re.compile(r"^```[a-zA-Z]*\s*")
_FENCE_CLOSE = re.compile(r"\s*```$")


def strip_code_fences(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_OPEN.sub("", cleaned)
        cleaned = _FENCE_CLOSE.sub("", cleaned)
    return cleaned.strip()


def parse_oracle_json(text: str) -> Dict[str, Any]:
    """Decodes the single JSON object the model was asked for.

    Falls back to the outermost ``{...}`` block when the model wrapped the
    object in commentary.
    """
    cleaned = strip_code_fences(text)
    try:
        parsed = json.loads(cleaned)
    except (json.JSONDecodeError, ValueError):
        parsed = None
        match = re.search(r"\{.*\}", cleaned, re.DOTALL)
        if match:
            try:
                parsed = json.loads(match.group())
            except (json.JSONDecodeError, ValueError):
                parsed = None

    if not isinstance(parsed, dict):
        logger.error("Parse error: %s", text[:500])
        raise OracleResponseError("Failed to parse AI response", raw=text)
    return parsed


def _str_or(v: Any, default: str) -> str:
    if isinstance(v, str) and v.strip():
        return v
    return default


def metadata_from_payload(payload: Dict[str, Any]) -> RouteMetadata:
    confidence = finite_float(payload.get("confidence"))
    miles = finite_float(payload.get("total_miles_estimate"))
    turns = payload.get("turn_by_turn")
    return RouteMetadata(
        route_name=_str_or(payload.get("route_name"), DEFAULT_ROUTE_NAME),
        location=_str_or(payload.get("location"), DEFAULT_LOCATION),
        confidence=confidence if confidence is not None else DEFAULT_CONFIDENCE,
        notes=payload.get("notes") if isinstance(payload.get("notes"), str) else "",
        total_miles_estimate=miles if miles is not None and miles > 0 else None,
        turn_by_turn=[t for t in turns if isinstance(t, str)] if isinstance(turns, list) else [],
        is_loop=payload.get("is_loop") is True,
    )


def extraction_from_payload(payload: Dict[str, Any]) -> OracleExtraction:
    waypoints = payload.get("key_waypoints")
    if not waypoints:
        waypoints = payload.get("waypoints")
    return OracleExtraction(waypoints=waypoints, metadata=metadata_from_payload(payload))


class ClaudeVisionOracle:
    def __init__(
        self,
        client: Any,
        model: str = ORACLE_MODEL,
        max_tokens: int = ORACLE_MAX_TOKENS,
        key_waypoints: bool = True,
    ):
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.prompt = KEY_WAYPOINTS_PROMPT if key_waypoints else DENSE_WAYPOINTS_PROMPT

    @classmethod
    def from_api_key(cls, api_key: str, timeout_s: float = ORACLE_TIMEOUT_S, **kwargs) -> "ClaudeVisionOracle":
        client = anthropic.Anthropic(api_key=api_key, timeout=timeout_s, max_retries=0)
        return cls(client, **kwargs)

    def _request(self, image_b64: str, media_type: str):
        try:
            return self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "image",
                                "source": {"type": "base64", "media_type": media_type, "data": image_b64},
                            },
                            {"type": "text", "text": self.prompt},
                        ],
                    }
                ],
            )
        except anthropic.APITimeoutError as e:
            logger.error("AI API timeout: %s", e)
            raise OracleError("AI API timeout", status_code=504, details=str(e)[:300])
        except anthropic.APIConnectionError as e:
            logger.error("AI API connection error: %s", e)
            raise OracleError("AI API unreachable", status_code=502, details=str(e)[:300])
        except anthropic.APIStatusError as e:
            logger.error("AI API error: %s %s", e.status_code, str(e)[:300])
            raise OracleError("AI API error", status_code=e.status_code, details=str(e)[:300])

    def extract(self, image_b64: str, media_type: Optional[str] = None) -> OracleExtraction:
        logger.info("Asking %s to trace the route", self.model)
        response = self._request(image_b64, media_type or DEFAULT_MEDIA_TYPE)

        text = None
        for block in getattr(response, "content", None) or []:
            if getattr(block, "type", None) == "text":
                text = block.text
                break
        if not text:
            raise OracleError("No response from AI", status_code=502)

        payload = parse_oracle_json(text)
        extraction = extraction_from_payload(payload)
        count = len(extraction.waypoints) if isinstance(extraction.waypoints, list) else 0
        logger.info("Oracle traced route %r with %d waypoints", extraction.metadata.route_name, count)
        return extraction
