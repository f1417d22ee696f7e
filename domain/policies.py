# policies.py
LIMITS = {
    "guest": {"max_usage": 10},  # 게스트 식별자당 총 사용 가능 횟수
    "account": {"max_usage": None},  # 가입 계정은 무제한
}

DEFAULT_FROM_STYLE = "default"
DEFAULT_PRESERVATION = 50
