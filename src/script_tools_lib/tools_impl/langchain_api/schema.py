from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Tuple, Type

from pydantic import BaseModel, Field, create_model

from script_tools_lib.tools_core.logger import get_logger
from script_tools_lib.tools_core.schema import SchemaValidator

logger = get_logger(__name__)

_PRIMITIVES: Dict[str, Any] = {
    "number": float,
    "integer": int,
    "boolean": bool,
}


class JsonSchemaModelFactory:
    """Builds pydantic argument models from the JSON schemas stored with each tool."""

    @classmethod
    def build_model(cls, schema: Optional[Dict[str, Any]], model_name: str) -> Type[BaseModel]:
        """Create the argument model of a tool.

        Args:
            schema: The tool's JSON schema. Local ``$ref``s are inlined first.
            model_name: Name of the generated model.

        Returns:
            A pydantic model class usable as a LangChain ``args_schema``.

        Raises:
            ToolValidationError: If the schema contains recursive references.
        """
        resolved = SchemaValidator.resolve_refs(dict(schema or {}))
        return cls._object_model(resolved, model_name)

    @classmethod
    def _object_model(cls, schema: Dict[str, Any], model_name: str) -> Type[BaseModel]:
        properties = schema.get("properties") or {}
        required = set(schema.get("required") or [])

        fields: Dict[str, Tuple[Any, Any]] = {}
        for name, prop in properties.items():
            prop = prop if isinstance(prop, dict) else {}
            annotation = cls._annotation(prop, f"{model_name}_{name}")
            description = prop.get("description")
            if name in required:
                fields[name] = (annotation, Field(..., description=description))
            else:
                fields[name] = (Optional[annotation], Field(default=None, description=description))

        logger.debug("Built argument model %s with %d fields", model_name, len(fields))
        return create_model(model_name, **fields)  # type: ignore[call-overload]

    @classmethod
    def _annotation(cls, prop: Dict[str, Any], model_name: str) -> Any:
        json_type = prop.get("type")
        if isinstance(json_type, list):
            # ["string", "null"] style unions collapse to the first concrete type
            json_type = next((t for t in json_type if t != "null"), None)

        if json_type == "string":
            if prop.get("enum"):
                return Literal[tuple(prop["enum"])]  # type: ignore[misc]
            if prop.get("format") == "date-time":
                return datetime
            return str

        if json_type in _PRIMITIVES:
            return _PRIMITIVES[json_type]

        if json_type == "array":
            items = prop.get("items")
            if isinstance(items, dict) and items:
                return List[cls._annotation(items, f"{model_name}_item")]  # type: ignore[misc]
            return List[Any]

        if json_type == "object":
            if prop.get("properties"):
                return cls._object_model(prop, model_name)
            return Dict[str, Any]

        return Any
