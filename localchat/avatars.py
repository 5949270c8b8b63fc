from urllib.parse import quote

DICEBEAR_URL = "https://api.dicebear.com/7.x/{style}/svg?seed={seed}"


def avatar_url(seed: str, style: str = "avataaars") -> str:
    return DICEBEAR_URL.format(style=style, seed=quote(seed, safe=""))


def user_avatar(name: str) -> str:
    return avatar_url(name)


def chat_avatar(name: str, participants: list[str], *, is_group: bool) -> str:
    if is_group:
        return avatar_url(name, style="shapes")

    # Direct chats show the peer, which is the second participant by convention.
    peer = participants[1] if len(participants) > 1 else participants[0]
    return avatar_url(peer)
