"""Pydantic data models exposed by the HOSKDOG backend."""

from .deposit import (
    BuildTxRequest,
    BuildTxResponse,
    DepositPreviewRequest,
    DepositPreviewResponse,
    HealthResponse,
    SubmitTxRequest,
    SubmitTxResponse,
)
from .faucet import (
    EligibilityRequest,
    EligibilityResponse,
    FaucetBalanceView,
    FaucetStatusResponse,
    SlurpRequest,
    SlurpResponse,
    StatsResponse,
)
from .relationships import (
    AddressListRequest,
    AnalysisResponse,
    AnalyzeRequest,
    DistributionResponse,
    GraphResponse,
    OwnershipResponse,
)

__all__ = [
	"AddressListRequest",
	"AnalysisResponse",
	"AnalyzeRequest",
	"BuildTxRequest",
	"BuildTxResponse",
	"DepositPreviewRequest",
	"DepositPreviewResponse",
	"DistributionResponse",
	"EligibilityRequest",
	"EligibilityResponse",
	"FaucetBalanceView",
	"FaucetStatusResponse",
	"GraphResponse",
	"HealthResponse",
	"OwnershipResponse",
	"SlurpRequest",
	"SlurpResponse",
	"StatsResponse",
	"SubmitTxRequest",
	"SubmitTxResponse",
]
