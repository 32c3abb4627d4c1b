from typing import Any, Dict, Set

import jsonref  # type: ignore

from ..exceptions import ToolValidationError
from ..logger import get_logger

logger = get_logger(__name__)


class SchemaValidator:
    """
    Helper class for validating and resolving tool input schemas.
    """

    @staticmethod
    def assert_no_recursive_refs(schema: Dict[str, Any]) -> None:
        """
        Checks if the schema contains recursive references by traversing the graph.
        Raises ToolValidationError if a cycle is detected.

        Args:
            schema: The JSON schema to check.

        Raises:
            ToolValidationError: If a recursive reference is found.
        """
        defs = schema.get("$defs", {}) or schema.get("definitions", {})

        def check(node: Any, path: Set[str]) -> None:
            if isinstance(node, dict):
                if "$ref" in node:
                    ref = node["$ref"]
                    if ref in path:
                        msg = (
                            f"Recursive structure detected: {ref}. "
                            "Recursive structures are not supported in tool input schemas."
                        )
                        logger.error(msg)
                        raise ToolValidationError(msg)

                    # e.g. #/$defs/Address
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

    @classmethod
    def resolve_refs(cls, schema: Dict[str, Any]) -> Dict[str, Any]:
        """
        Inline local ``$ref`` pointers after checking they are not recursive.

        Args:
            schema: The JSON schema to resolve.

        Returns:
            A plain dict without ``$ref`` entries or definition blocks.
        """
        cls.assert_no_recursive_refs(schema)
        # proxies=False ensures we get a plain dict back, not JsonRef objects
        resolved = jsonref.replace_refs(schema, proxies=False)
        resolved = dict(resolved)
        resolved.pop("$defs", None)
        resolved.pop("definitions", None)
        return resolved
