"""
LinkedIn provider implementation.
Signs members in with OAuth 2.0 and publishes UGC posts on their behalf.
"""
import logging
from typing import Any, Dict

import httpx

from settings import (
    LINKEDIN_AUTHORIZE_URL,
    LINKEDIN_TOKEN_URL,
    LINKEDIN_USERINFO_URL,
    LINKEDIN_UGC_POSTS_URL,
    LINKEDIN_RESTLI_PROTOCOL_VERSION,
)
from accounts.models import Session
from oauth import ManualUrnStrategy, OpenIDStrategy, response_body, send
from providers.base_provider import BaseProvider, PostRequest

logger = logging.getLogger(__name__)

# Scope that lets a member post; granted without openid in older app setups
MEMBER_SOCIAL_SCOPE = "w_member_social"
PERSON_URN_TEMPLATE = "urn:li:person:{sub}"


class LinkedInProvider(BaseProvider):
    """Provider implementation for LinkedIn"""

    display_name = "LinkedIn"
    authorize_endpoint = LINKEDIN_AUTHORIZE_URL
    token_endpoint = LINKEDIN_TOKEN_URL
    authorize_params = {"prompt": "consent"}

    def identity_strategies(self):
        return [
            OpenIDStrategy(LINKEDIN_USERINFO_URL, urn_template=PERSON_URN_TEMPLATE),
            ManualUrnStrategy(MEMBER_SOCIAL_SCOPE),
        ]

    def build_action_payload(self, session: Session, post: PostRequest) -> Dict[str, Any]:
        """Build a ugcPosts body; a URL turns the share into an article"""
        share_content: Dict[str, Any] = {
            "shareCommentary": {"text": post.text},
            "shareMediaCategory": "ARTICLE" if post.url else "NONE",
        }
        if post.url:
            share_content["media"] = [{"status": "READY", "originalUrl": post.url}]

        return {
            "author": session.user_urn,
            "lifecycleState": "PUBLISHED",
            "specificContent": {
                "com.linkedin.ugc.ShareContent": share_content,
            },
            "visibility": {"com.linkedin.ugc.MemberNetworkVisibility": "PUBLIC"},
        }

    async def publish(self, client: httpx.AsyncClient, session: Session, payload: Dict[str, Any]) -> Any:
        response = await send(
            client,
            "POST",
            LINKEDIN_UGC_POSTS_URL,
            "LinkedIn publish",
            json=payload,
            headers={
                "Authorization": f"Bearer {session.access_token}",
                "X-Restli-Protocol-Version": LINKEDIN_RESTLI_PROTOCOL_VERSION,
            },
        )

        body = response_body(response)
        remote_id = body.get("id") if isinstance(body, dict) else None
        # ugcPosts may answer 201 with an empty body and the id in a header
        return remote_id or response.headers.get("x-restli-id")
