"""Simple two-language (ko/en) translation helper."""

_STRINGS: dict[str, dict[str, str]] = {
    "page_title": {
        "ko": "엘리멘탈 바이브",
        "en": "Elemental Vibe",
    },
    "label_birthdate": {
        "ko": "생년월일 (MM/DD/YYYY)",
        "en": "Birthdate (MM/DD/YYYY)",
    },
    "label_name": {
        "ko": "이름",
        "en": "Name",
    },
    "btn_reveal": {
        "ko": "✦ 원소 읽기",
        "en": "✦ Reveal",
    },
    "btn_restart": {
        "ko": "다시 시작하기",
        "en": "Re-calibrate",
    },
    "loading": {
        "ko": "✦ 우주의 서명을 읽는 중",
        "en": "✦ Reading your cosmic signature",
    },
    "narrative_error": {
        "ko": "별이 흐려요. 잠시 후 다시 시도해주세요.",
        "en": "The stars are cloudy. Try again later.",
    },
    "section_birth": {
        "ko": "태어난 계절",
        "en": "Birth Imagery",
    },
    "section_city": {
        "ko": "영혼의 도시",
        "en": "Soul City",
    },
    "section_souls": {
        "ko": "끌리는 영혼",
        "en": "Complementary Souls",
    },
    "section_talismans": {
        "ko": "부적",
        "en": "Talismans",
    },
    "alignment": {
        "ko": "{primary}와 {secondary}의 조화가 당신만의 주파수를 드러내요.",
        "en": "Your alignment with the {primary} and {secondary} forces reveals a unique cosmic frequency.",
    },
    "privacy_body": {
        "ko": "입력한 정보는 서비스 제공을 위해 Anthropic에 전송되며, 별도로 저장되지 않습니다.",
        "en": "Your input is sent to Anthropic solely to generate the narrative. No personal data is stored.",
    },
}


def t(key: str, lang: str) -> str:
    """Return the translated string for key in lang.

    Falls back to 'en', then to the key itself if not found.
    """
    entry = _STRINGS.get(key)
    if entry is None:
        return key
    return entry.get(lang) or entry.get("en") or key
