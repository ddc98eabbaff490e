from ytcomments.youtube.http_client import InnerTubeHttpClient, TimeBudgetExceeded, YouTubeRequestError
from ytcomments.youtube.parser import InnerTubeParser
from ytcomments.youtube.client import CommentsUnavailableError, YouTubeClient
from ytcomments.youtube.models import (
	CommentNode,
	CommentPage,
	Continuation,
	SearchPage,
	VideoNode,
)

__all__ = [
	"InnerTubeHttpClient",
	"TimeBudgetExceeded",
	"YouTubeRequestError",
	"InnerTubeParser",
	"CommentsUnavailableError",
	"YouTubeClient",
	"CommentNode",
	"CommentPage",
	"Continuation",
	"SearchPage",
	"VideoNode",
]
