# costing_tool/estimate/estimator.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from costing_tool.estimate.asset import estimate_asset_cost
from costing_tool.estimate.calculator import CalculationContext
from costing_tool.estimate.request import AssetParameters, CostEstimateRequest
from costing_tool.estimate.response import (
    AssetCostEstimate,
    CostEstimate,
    CostEstimateError,
    UnknownCurrencyConversion,
    combine_all,
)
from costing_tool.library.model import CostLibrary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EstimateOptions:
    # Currency code to report costs in; defaults to the library's base currency
    target_currency: Optional[str] = None

    def to_context(self, cost_library: CostLibrary) -> CalculationContext:
        code = self.target_currency or cost_library.currency_conversion.base_currency
        rate = cost_library.currency_conversion.rate(code)
        if rate is None:
            raise UnknownCurrencyConversion(code)
        return CalculationContext(target_currency_rate=1.0 / rate)


def estimate_cost(
    cost_library: CostLibrary,
    assets: Union[CostEstimateRequest, Iterable[AssetParameters]],
    options: Optional[EstimateOptions] = None,
) -> CostEstimate:
    """
    Estimate every asset of a request against one library.

    All or nothing: if any asset fails, the per-asset errors are combined and
    raised as one CostEstimateError; no partial estimate is returned.
    """
    if isinstance(assets, CostEstimateRequest):
        assets = assets.assets
    ctx = (options or EstimateOptions()).to_context(cost_library)
    items = cost_library.items_by_id()

    estimates: List[AssetCostEstimate] = []
    errors: List[CostEstimateError] = []
    for asset in assets:
        try:
            estimates.append(estimate_asset_cost(cost_library, asset, ctx, items))
        except CostEstimateError as e:
            logger.debug("asset %s failed: %s", asset.id, e)
            errors.append(e)

    if errors:
        raise combine_all(errors)
    return CostEstimate(assets=estimates)


__all__ = ["EstimateOptions", "estimate_cost"]
