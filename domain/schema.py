MAX_TEXT_LENGTH = 4000

# -------------------- 입력 양식 스키마 --------------------
# ===== JSON API( /api/transform ) POST 스키마 =====
transform_schema = {
    "type": "object",
    "properties": {
        "originalText": {"type": "string", "minLength": 1, "maxLength": MAX_TEXT_LENGTH},
        "fromStyle": {"type": ["string", "null"], "maxLength": 100},
        "toStyle": {"type": "string", "minLength": 1, "maxLength": 100},
        "preservationPercentage": {"type": "number", "minimum": 0, "maximum": 100, "default": 50},
    },
    "required": ["originalText", "toStyle"],
    "additionalProperties": True,
}

register_schema = {
    "type": "object",
    "properties": {
        "username": {"type": "string", "minLength": 1, "maxLength": 64},
        "password": {"type": "string", "minLength": 4, "maxLength": 200},
    },
    "required": ["username", "password"],
    "additionalProperties": True,
}

login_schema = {
    "type": "object",
    "properties": {
        "username": {"type": "string", "minLength": 1, "maxLength": 64},
        "password": {"type": "string", "minLength": 1, "maxLength": 200},
    },
    "required": ["username", "password"],
    "additionalProperties": True,
}
