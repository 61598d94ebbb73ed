"""
app/mappers/response_mapper.py

Maps a raw external JSON response onto normalized user records using the
field mappings of an API configuration.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Sequence

from app.exceptions import FieldMappingError
from app.mappers.json_path import JsonPathError, evaluate
from db.models.api_configuration import ApiConfiguration, FieldMapping

logger = logging.getLogger(__name__)

NormalizedUserRecord = dict[str, Any]


class ResponseMapper:
    """
    Turns one response body into one normalized record per result item.

    A list result root yields one record per element (order preserved); any
    other result root is treated as a single item. Missing required fields
    fail the whole response, not just the affected item.
    """

    def map_response(
        self,
        raw_body: str | bytes,
        config: ApiConfiguration,
    ) -> list[NormalizedUserRecord]:
        logger.info("Parsing response source=%s", config.source_name)

        try:
            document = json.loads(raw_body)
        except (TypeError, ValueError) as exc:
            logger.error("Response is not valid JSON source=%s error=%s", config.source_name, exc)
            raise FieldMappingError(
                f"Failed to parse response for source: {config.source_name}"
            ) from exc

        root_path = config.resolved_root_path()
        try:
            result_root = evaluate(document, root_path)
        except JsonPathError as exc:
            logger.error(
                "Response root path did not resolve source=%s root_path=%s error=%s",
                config.source_name,
                root_path,
                exc,
            )
            raise FieldMappingError(
                f"Failed to parse response for source: {config.source_name}"
            ) from exc

        items = result_root if isinstance(result_root, list) else [result_root]
        mappings = list(config.field_mappings)
        records = [self.map_item(item, mappings) for item in items]

        logger.info("Parsed items source=%s count=%s", config.source_name, len(records))
        return records

    def map_item(
        self,
        item: Any,
        mappings: Sequence[FieldMapping],
    ) -> NormalizedUserRecord:
        """
        Apply every mapping, in declaration order, to one result item.
        """

        record: NormalizedUserRecord = {}
        for mapping in mappings:
            field_name = mapping.internal_field_name
            try:
                record[field_name] = evaluate(item, mapping.json_path)
            except JsonPathError as exc:
                if mapping.required:
                    raise FieldMappingError(
                        f"Required field mapping failed: {field_name}",
                        field_name=field_name,
                    ) from exc
                if mapping.default_value is not None:
                    record[field_name] = mapping.default_value
                logger.debug("Optional field not found field=%s path=%s", field_name, mapping.json_path)
        return record
