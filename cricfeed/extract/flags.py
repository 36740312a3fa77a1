"""Team name -> national flag image (flagcdn.com)."""

import re
from typing import Optional

FLAG_CDN = "https://flagcdn.com"

# Full names and the short codes upstream uses. Scotland shares the UK flag;
# West Indies has none, so Jamaica's is used.
TEAM_TO_COUNTRY = {
    "india": "in",
    "australia": "au",
    "england": "gb",
    "south africa": "za",
    "new zealand": "nz",
    "pakistan": "pk",
    "sri lanka": "lk",
    "bangladesh": "bd",
    "west indies": "jm",
    "afghanistan": "af",
    "ireland": "ie",
    "zimbabwe": "zw",
    "netherlands": "nl",
    "scotland": "gb",
    "nepal": "np",
    "oman": "om",
    "namibia": "na",
    "united arab emirates": "ae",
    "uae": "ae",
    "italy": "it",
    "qatar": "qa",
    "bahrain": "bh",
    "usa": "us",
    "united states": "us",
    "canada": "ca",
    "ind": "in",
    "aus": "au",
    "eng": "gb",
    "rsa": "za",
    "sa": "za",
    "nz": "nz",
    "pak": "pk",
    "sl": "lk",
    "ban": "bd",
    "wi": "jm",
    "afg": "af",
    "ire": "ie",
    "zim": "zw",
    "ned": "nl",
    "sco": "gb",
    "nep": "np",
    "nam": "na",
    "oma": "om",
    "ita": "it",
    "qat": "qa",
    "bhr": "bh",
    "can": "ca",
    "us": "us",
}


def normalize_team_name(name: str) -> str:
    """Drop women/U19/"A"-side qualifiers: 'India Women' -> 'india', 'England A' -> 'england'."""
    value = (name or "").lower()
    value = re.sub(r"\s*women\s*", " ", value)
    value = re.sub(r"\s*u-?19\s*", " ", value)
    value = re.sub(r"\s+a$", "", value.strip())
    return re.sub(r"\s+", " ", value).strip()


def get_country_code(team_name: str, short_name: str = "") -> Optional[str]:
    normalized_name = normalize_team_name(team_name)
    normalized_short = normalize_team_name(short_name)

    if normalized_short in TEAM_TO_COUNTRY:
        return TEAM_TO_COUNTRY[normalized_short]
    if normalized_name in TEAM_TO_COUNTRY:
        return TEAM_TO_COUNTRY[normalized_name]

    # Containment only for full names; two-letter codes would match anything.
    if len(normalized_name) > 3:
        for key, code in TEAM_TO_COUNTRY.items():
            if len(key) > 3 and (key in normalized_name or normalized_name in key):
                return code

    return None


def get_team_flag_url(team_name: str, short_name: str = "", size: int = 40) -> Optional[str]:
    code = get_country_code(team_name, short_name)
    return f"{FLAG_CDN}/w{size}/{code}.png" if code else None
