import dataclasses


@dataclasses.dataclass(frozen=True)
class RedirectMode:
    """
    Send the user's browser to us, and back to `uri` when done
    """

    uri: str
    nonce: str | None = None


@dataclasses.dataclass(frozen=True)
class AppMode:
    """
    Launch an application on the user's device at our app URL
    """

    uri: str | None = None
    nonce: str | None = None


@dataclasses.dataclass(frozen=True)
class UserCodeMode:
    """
    Show the user a short code to type in at our user-code page
    """


@dataclasses.dataclass(frozen=True)
class UserCodeUriMode:
    """
    Like UserCodeMode, but the client tells the user where to go
    """

    uri: str


InteractionMode = RedirectMode | AppMode | UserCodeMode | UserCodeUriMode
