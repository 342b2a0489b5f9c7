from intervita.auth.token import (
    AccessToken,
    InvalidAccessToken,
    VideoGrant,
    decode_access_token,
)

__all__ = [
    "AccessToken", "InvalidAccessToken", "VideoGrant", "decode_access_token",
]
