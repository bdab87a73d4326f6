"""Brawl Stars vocabulary used for prompting and keyword extraction"""

from typing import Dict, List, Tuple

BRAWLERS: Tuple[str, ...] = (
    "Shelly", "Nita", "Colt", "Bull", "Brock", "El Primo", "Barley", "Poco",
    "Rosa", "Jessie", "Dynamike", "Tick", "8-Bit", "Rico", "Darryl", "Penny",
    "Carl", "Jacky", "Gus", "Bo", "Emz", "Stu", "Piper", "Pam", "Frank",
    "Bibi", "Bea", "Nani", "Edgar", "Griff", "Grom", "Bonnie", "Gale",
    "Colette", "Belle", "Ash", "Lola", "Sam", "Mandy", "Maisie", "Hank",
    "Pearl", "Larry & Lawrie", "Angelo", "Berry", "Shade", "Mortis", "Tara",
    "Gene", "Max", "Mr. P", "Sprout", "Byron", "Squeak", "Lou", "Ruffs",
    "Buzz", "Fang", "Eve", "Janet", "Otis", "Buster", "Gray", "R-T", "Willow",
    "Doug", "Chuck", "Charlie", "Mico", "Melodie", "Lily", "Clancy", "Moe",
    "Juju", "Spike", "Crow", "Leon", "Sandy", "Amber", "Meg", "Surge",
    "Chester", "Cordelius", "Kit", "Draco", "Kenji",
)

GAME_MODES: Tuple[str, ...] = (
    "Gem Grab", "Showdown", "Duo Showdown", "Brawl Ball", "Heist", "Bounty",
    "Hot Zone", "Knockout", "Wipeout", "Siege", "Brawl Hockey", "Payload",
    "Basket Brawl", "Volley Brawl", "Duels", "Robo Rumble", "Big Game",
    "Boss Fight",
)

# Content type -> phrases that suggest it in a free-text query
CONTENT_TYPE_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "tutorial": ("tutorial", "how to", "guide", "learn"),
    "tips": ("tips", "tricks", "advice"),
    "gameplay": ("gameplay", "playing", "matches"),
    "pro": ("pro", "professional", "competitive"),
    "entertainment": ("funny", "fun", "entertaining", "entertainment"),
    "highlights": ("highlights", "moments", "best"),
}

SKILL_LEVEL_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("beginner", ("beginner", "new", "start")),
    ("advanced", ("advanced", "pro", "expert")),
    ("intermediate", ("intermediate",)),
)

CONTENT_TYPES: List[Dict[str, str]] = [
    {"id": "tutorial", "name": "Tutorials"},
    {"id": "gameplay", "name": "Gameplay"},
    {"id": "entertainment", "name": "Entertainment"},
    {"id": "pro", "name": "Pro Play"},
    {"id": "esports", "name": "Esports"},
    {"id": "tips", "name": "Tips & Tricks"},
    {"id": "funny", "name": "Funny Moments"},
    {"id": "highlights", "name": "Highlights"},
    {"id": "strategy", "name": "Strategy"},
]

SKILL_LEVEL_OPTIONS: List[Dict[str, str]] = [
    {"id": "beginner", "name": "Beginner"},
    {"id": "intermediate", "name": "Intermediate"},
    {"id": "advanced", "name": "Advanced"},
]

SORT_OPTIONS: List[Dict[str, str]] = [
    {"id": "relevance", "name": "Most Relevant"},
    {"id": "recent", "name": "Most Recent"},
    {"id": "popular", "name": "Most Popular"},
    {"id": "trending", "name": "Trending"},
]
