import re

_NON_ALNUM = re.compile(r'[^a-z0-9]+')

def slugify(value: str) -> str:
    """Lower-case a name and collapse everything else to single dashes"""
    return _NON_ALNUM.sub('-', value.lower()).strip('-')
