"""JSON schema for story graph documents.

Only the node and choice shape is checked here. Conditions and effects accept
any JSON value: the parser maps anything it cannot interpret to
``UnknownCondition``/``UnknownEffect`` and the validator reports it.
"""

_NULLABLE_STRING = {"type": ["string", "null"]}

STORY_GRAPH_SCHEMA = {
    "type": "object",
    "required": ["startNode", "nodes"],
    "properties": {
        "startNode": {"type": "string", "minLength": 1},
        "title": {"type": "string"},
        "nodes": {
            "type": "object",
            "additionalProperties": {"$ref": "#/definitions/node"},
        },
    },
    "definitions": {
        "condition": {},
        "effects": {
            "type": ["array", "null"],
        },
        "text": {
            "anyOf": [
                {"type": "string"},
                {"type": "null"},
                {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "required": ["content"],
                        "properties": {
                            "content": {"type": "string"},
                            "condition": {"$ref": "#/definitions/condition"},
                        },
                    },
                },
            ]
        },
        "choice": {
            "type": "object",
            "properties": {
                "text": {"type": "string"},
                "next": _NULLABLE_STRING,
                "condition": {"$ref": "#/definitions/condition"},
                "effects": {"$ref": "#/definitions/effects"},
                "timeCost": {"type": "integer", "minimum": 0},
                "deathMessage": {"type": "string"},
                "winMessage": {"type": "string"},
            },
        },
        "node": {
            "type": "object",
            "properties": {
                "id": {"type": "string"},
                "type": {"type": "string"},
                "text": {"$ref": "#/definitions/text"},
                "choices": {
                    "type": ["array", "null"],
                    "items": {"$ref": "#/definitions/choice"},
                },
                "next": _NULLABLE_STRING,
                "variable": _NULLABLE_STRING,
                "condition": {"$ref": "#/definitions/condition"},
                "nextTrue": _NULLABLE_STRING,
                "nextFalse": _NULLABLE_STRING,
                "deathMessage": {"type": "string"},
                "winMessage": {"type": "string"},
                "effects": {"$ref": "#/definitions/effects"},
                "timeSet": {"type": "integer", "minimum": 0},
                "location": _NULLABLE_STRING,
                "image": _NULLABLE_STRING,
            },
        },
    },
}
