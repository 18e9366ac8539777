"""Random nickname generation for new accounts."""

from __future__ import annotations

import secrets

_ADJECTIVES = (
    "Amber", "Brave", "Calm", "Clever", "Cosmic", "Crimson", "Curious", "Daring",
    "Dusky", "Eager", "Fuzzy", "Gentle", "Golden", "Happy", "Hidden", "Jolly",
    "Lucky", "Lunar", "Mellow", "Misty", "Nimble", "Quiet", "Rapid", "Rusty",
    "Silent", "Silver", "Sleepy", "Snowy", "Sunny", "Swift", "Velvet", "Witty",
)

_NOUNS = (
    "Badger", "Bison", "Comet", "Cricket", "Falcon", "Ferret", "Gecko", "Heron",
    "Koala", "Lemur", "Lynx", "Marmot", "Moose", "Narwhal", "Otter", "Owl",
    "Panda", "Pelican", "Puffin", "Quokka", "Raven", "Sparrow", "Tapir", "Tiger",
    "Toucan", "Walrus", "Weasel", "Wombat", "Yak", "Zebra", "Popcorn", "Projector",
)


def generate_random_nickname() -> str:
    """Return something like ``SleepyOtter482``."""
    adjective = secrets.choice(_ADJECTIVES)
    noun = secrets.choice(_NOUNS)
    return f"{adjective}{noun}{secrets.randbelow(1000)}"
