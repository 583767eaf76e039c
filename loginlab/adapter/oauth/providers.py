"""Static OAuth endpoint table for the supported providers."""

from pydantic import BaseModel, ConfigDict

from loginlab.domain.value import AuthProvider


class ProviderEndpoints(BaseModel):
    """How to talk OAuth 2.0 to one provider.

    Attributes:
        authorize_url: Where the user is redirected to grant access
        token_url: Code-for-token exchange endpoint
        userinfo_url: Profile endpoint called with the access token
        scopes: Requested scopes
        scope_separator: How scopes are joined in the authorize URL
        basic_auth: Send client credentials as HTTP basic auth on the token
            request instead of in the form body
        pkce: Use a PKCE S256 challenge (verifier kept per state)
        userinfo_envelope: Key the profile is wrapped in, if any
        authorize_params: Extra query params for the authorize URL
        userinfo_params: Extra query params for the profile request
        token_in_query: Pass the access token as a query param instead of
            an Authorization header
    """

    model_config = ConfigDict(frozen=True)

    authorize_url: str
    token_url: str
    userinfo_url: str
    scopes: tuple[str, ...] = ()
    scope_separator: str = " "
    basic_auth: bool = False
    pkce: bool = False
    userinfo_envelope: str | None = None
    authorize_params: dict[str, str] = {}
    userinfo_params: dict[str, str] = {}
    token_in_query: bool = False


PROVIDER_ENDPOINTS: dict[AuthProvider, ProviderEndpoints] = {
    AuthProvider.GOOGLE: ProviderEndpoints(
        authorize_url="https://accounts.google.com/o/oauth2/v2/auth",
        token_url="https://oauth2.googleapis.com/token",
        userinfo_url="https://www.googleapis.com/oauth2/v2/userinfo",
        scopes=("openid", "email", "profile"),
        authorize_params={"access_type": "offline", "prompt": "consent"},
    ),
    AuthProvider.GITHUB: ProviderEndpoints(
        authorize_url="https://github.com/login/oauth/authorize",
        token_url="https://github.com/login/oauth/access_token",
        userinfo_url="https://api.github.com/user",
        scopes=("read:user", "user:email"),
    ),
    AuthProvider.REDDIT: ProviderEndpoints(
        authorize_url="https://www.reddit.com/api/v1/authorize",
        token_url="https://www.reddit.com/api/v1/access_token",
        userinfo_url="https://oauth.reddit.com/api/v1/me",
        scopes=("identity", "read"),
        basic_auth=True,
        authorize_params={"duration": "permanent"},
    ),
    AuthProvider.TWITTER: ProviderEndpoints(
        authorize_url="https://twitter.com/i/oauth2/authorize",
        token_url="https://api.twitter.com/2/oauth2/token",
        userinfo_url="https://api.twitter.com/2/users/me",
        scopes=("tweet.read", "users.read", "offline.access"),
        basic_auth=True,
        pkce=True,
        userinfo_envelope="data",
        userinfo_params={"user.fields": "id,name,username,profile_image_url"},
    ),
    AuthProvider.INSTAGRAM: ProviderEndpoints(
        authorize_url="https://api.instagram.com/oauth/authorize",
        token_url="https://api.instagram.com/oauth/access_token",
        userinfo_url="https://graph.instagram.com/me",
        scopes=("user_profile",),
        scope_separator=",",
        userinfo_params={"fields": "id,username"},
        token_in_query=True,
    ),
}
