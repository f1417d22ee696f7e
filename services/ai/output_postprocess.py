COMMON_PREFIXES = (
    "Here's the text transformed",
    "Here is the text transformed",
    "The transformed text is",
    "Here's the transformed text",
    "Here is the transformed text",
)


def _strip_quotes(text):
    """전체를 감싼 큰따옴표만 제거"""
    out = (text or "").strip()
    if len(out) >= 2 and out.startswith('"') and out.endswith('"'):
        out = out[1:-1].strip()
    return out


def _clean_output(text, prompt=None):
    """
    text-generation 모델(프롬프트를 되풀이하는 모델) 출력 정리:
      - 프롬프트를 그대로 되풀이한 경우 프롬프트 뒤쪽만 사용
      - 맨 앞의 "Here is the transformed text:" 류 머리말 제거
      - 전체를 감싼 큰따옴표 제거
    chat 모델 출력에는 _strip_quotes 만 쓴다.
    """
    out = (text or "").strip()
    if prompt and prompt in out:
        out = out[out.index(prompt) + len(prompt):].strip()

    for prefix in COMMON_PREFIXES:
        if not out.startswith(prefix):
            continue
        colon = out.find(":", len(prefix))
        if colon != -1:
            out = out[colon + 1:].strip()
        break

    return _strip_quotes(out)
