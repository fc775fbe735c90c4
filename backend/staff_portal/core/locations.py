GROUP_OVERVIEW = "GroupOverview"

BRAND_GROUPS: dict[str, list[str]] = {
    "La Mia Mamma (Brand)": [
        "La Mia Mamma - Chelsea",
        "La Mia Mamma - Hollywood Road",
        "La Mia Mamma - Notting Hill",
        "La Mia Mamma - Battersea",
    ],
    "Fish and Bubbles (Brand)": [
        "Fish and Bubbles - Fulham",
        "Fish and Bubbles - Notting Hill",
    ],
    "Made in Italy (Brand)": [
        "Made in Italy - Chelsea",
        "Made in Italy - Battersea",
    ],
}

STORE_LOCATIONS = [site for sites in BRAND_GROUPS.values() for site in sites]

ALL_LOCATIONS = [GROUP_OVERVIEW, *BRAND_GROUPS.keys(), *STORE_LOCATIONS]
