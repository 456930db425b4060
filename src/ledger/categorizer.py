"""
Expense Categorizer

Maps a free-text expense description to a reporting category by
keyword matching.

Rules are evaluated top to bottom and the first one with a keyword
contained in the lower-cased description wins. Specific payees (ЕВН,
ДДС, Яна) sit above the broad groups, so "ЕВН ток" lands in ЕВН and
not in utilities. Reordering the list changes results.
"""

from typing import NamedTuple


class CategoryRule(NamedTuple):
    keywords: tuple[str, ...]
    category: str


DEFAULT_CATEGORY = "Други разходи"

CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(("евн",), "ЕВН"),
    CategoryRule(("ддс", "dds"), "ДДС"),
    CategoryRule(("яна",), "Яна"),
    CategoryRule(("патент", "лиценз", "такса"), "Такси и лицензи"),
    CategoryRule(("счетовод", "данък", "данъч"), "Счетоводство"),
    CategoryRule(("козметик", "крем", "грим", "парфюм"), "Козметика"),
    CategoryRule(("храна", "supermarket", "магазин", "abc", "dm"), "Храна и домакинство"),
    CategoryRule(("транспорт", "бензин", "паркинг", "такси"), "Транспорт"),
    CategoryRule(("комунал", "ток", "вода", "интернет", "телефон"), "Комунални услуги"),
    CategoryRule(("ремонт", "поддръжка", "строител"), "Ремонт и поддръжка"),
    CategoryRule(("медицин", "лекар", "аптек"), "Здравеопазване"),
    CategoryRule(("застраховк",), "Застраховки"),
    CategoryRule(("облекло", "дрехи", "обуща"), "Облекло"),
    CategoryRule(("развлечени", "ресторант", "кафе", "бар"), "Развлечения"),
    CategoryRule(("образовани", "курс", "книга"), "Образование"),
)


def categorize(
    description: str,
    rules: tuple[CategoryRule, ...] = CATEGORY_RULES,
) -> str:
    """Return the category of the first matching rule, or the default."""
    text = description.lower()
    for rule in rules:
        if any(keyword in text for keyword in rule.keywords):
            return rule.category
    return DEFAULT_CATEGORY


def all_categories(rules: tuple[CategoryRule, ...] = CATEGORY_RULES) -> list[str]:
    """Every category `categorize` can return, in rule order."""
    return [rule.category for rule in rules] + [DEFAULT_CATEGORY]
