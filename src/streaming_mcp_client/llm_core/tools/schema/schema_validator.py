from typing import Any, Dict, Set

import jsonref  # type: ignore

from ...exceptions import ToolRegistrationError
from ...logger import get_logger

logger = get_logger(__name__)


class SchemaValidator:
    """
    Helper class for validating and sanitizing the parameter schemas advertised by tool providers.
    """

    METADATA_KEYS = ("$defs", "$schema", "$id", "title", "definitions")

    @staticmethod
    def assert_no_recursive_refs(schema: Dict[str, Any]) -> None:
        """
        Checks if the schema contains recursive references by traversing the graph.

        Args:
            schema: The JSON schema to check.

        Raises:
            ToolRegistrationError: If a recursive reference is found.
        """
        defs = schema.get("$defs", {}) or schema.get("definitions", {})

        def check(node: Any, path: Set[str]) -> None:
            if isinstance(node, dict):
                if "$ref" in node:
                    ref = node["$ref"]
                    if ref in path:
                        raise ToolRegistrationError(f"Recursive structure detected: {ref}.")

                    # Local refs only, e.g. #/$defs/MyModel
                    if isinstance(ref, str) and ref.startswith("#"):
                        parts = ref.split("/")
                        if len(parts) >= 3:
                            def_name = parts[-1]
                            if def_name in defs:
                                check(defs[def_name], path | {ref})
                    return

                for v in node.values():
                    check(v, path)
            elif isinstance(node, list):
                for item in node:
                    check(item, path)

        check(schema, set())

    @staticmethod
    def sanitize_schema(schema: Any) -> Any:
        """
        Removes metadata keys ($defs, $schema, $id, title) and simplifies
        Optional fields (anyOf with null), recursively.

        Args:
            schema: The JSON schema to sanitize.

        Returns:
            The sanitized schema.
        """
        if not isinstance(schema, dict):
            return schema

        new_schema = schema.copy()

        for key in SchemaValidator.METADATA_KEYS:
            new_schema.pop(key, None)

        if "anyOf" in new_schema and isinstance(new_schema["anyOf"], list):
            non_null = [x for x in new_schema["anyOf"] if not (isinstance(x, dict) and x.get("type") == "null")]

            if len(non_null) == 1 and isinstance(non_null[0], dict):
                # The parent's description wins over the variant's
                merged = non_null[0].copy()
                if "description" in new_schema:
                    merged["description"] = new_schema["description"]
                return SchemaValidator.sanitize_schema(merged)

        for key, value in new_schema.items():
            if key == "properties" and isinstance(value, dict):
                # Property names may collide with metadata keys ("title"), keep them all
                new_schema[key] = {name: SchemaValidator.sanitize_schema(prop) for name, prop in value.items()}
            elif isinstance(value, dict):
                new_schema[key] = SchemaValidator.sanitize_schema(value)
            elif isinstance(value, list):
                new_schema[key] = [
                    SchemaValidator.sanitize_schema(item) if isinstance(item, dict) else item for item in value
                ]

        return new_schema

    @classmethod
    def prepare_parameters(cls, schema: Any, tool_name: str = "unknown") -> Dict[str, Any]:
        """Turns a provider's raw input schema into the schema published in the catalog.

        Local ``$ref``s are inlined with jsonref unless the schema is recursive, in
        which case the refs are left in place.

        Args:
            schema: The raw provider schema (may be None).
            tool_name: Used for log messages.

        Returns:
            A JSON-schema dictionary, never None.
        """
        if not isinstance(schema, dict) or not schema:
            return {"type": "object", "properties": {}}

        try:
            cls.assert_no_recursive_refs(schema)
        except ToolRegistrationError as e:
            logger.warning("Schema of tool '%s' is recursive, keeping refs: %s", tool_name, e)
            return dict(schema)

        # proxies=False ensures we get a plain dict back, not JsonRef objects
        resolved = jsonref.replace_refs(schema, proxies=False)
        return cls.sanitize_schema(resolved)
