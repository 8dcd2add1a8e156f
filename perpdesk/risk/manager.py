"""
Risk manager for the simulated perpetuals desk.

The manager is a calculator: it derives risk metrics, pre-trade checks and
per-position advice from a snapshot of positions, orders and account balance
supplied by the caller. The only state it owns is its ``RiskLimits``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union

from .limits import RiskLimits
from .positions import Position
from ..market.orders import Order
from ..market.schema import OrderRequest
from ..utils.logger import get_logger

# Leverage above which a position counts as high leverage for liquidation risk
HIGH_LEVERAGE = 10.0


class LiquidationRisk(Enum):
    """Qualitative proximity to forced closure."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Urgency(Enum):
    """Urgency of a position recommendation."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class RiskMetrics:
    """Aggregate risk metrics for an account snapshot."""
    total_exposure: float
    available_margin: float
    margin_used: float
    margin_utilization: float
    total_unrealized_pnl: float
    total_realized_pnl: float
    risk_score: float
    max_position_size: float
    liquidation_risk: LiquidationRisk
    warnings: List[str] = field(default_factory=list)
    
    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["liquidation_risk"] = self.liquidation_risk.value
        return data


@dataclass
class OrderRiskDecision:
    """Outcome of a pre-trade risk validation."""
    allowed: bool
    reasons: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Recommendation:
    """Advisory action for a single position."""
    action: str
    reason: str
    urgency: Urgency
    
    def to_dict(self) -> Dict[str, str]:
        return {"action": self.action, "reason": self.reason, "urgency": self.urgency.value}


class RiskManager:
    """Stateless risk calculator with mutable risk limits."""
    
    def __init__(self, limits: Optional[RiskLimits] = None) -> None:
        """
        Initialize risk manager.
        
        Args:
            limits: Risk limits (defaults apply when None)
        """
        self.limits = limits or RiskLimits()
        self.logger = get_logger(__name__)
    
    def calculate_risk_metrics(
        self,
        positions: Sequence[Position],
        orders: Sequence[Order],
        account_balance: float
    ) -> RiskMetrics:
        """
        Calculate aggregate risk metrics.
        
        Args:
            positions: Current positions
            orders: Current orders (accepted for interface symmetry, not scored)
            account_balance: Account balance in account currency
            
        Returns:
            Risk metrics for the snapshot
        """
        total_exposure = sum(abs(pos.size * pos.mark_price) for pos in positions)
        margin_used = sum(pos.margin for pos in positions)
        available_margin = account_balance - margin_used
        margin_utilization = self._margin_utilization(margin_used, account_balance)
        
        total_unrealized_pnl = sum(pos.unrealized_pnl for pos in positions)
        total_realized_pnl = sum(pos.realized_pnl for pos in positions)
        
        pnl_ratio = total_unrealized_pnl / account_balance if account_balance > 0 else 0.0
        risk_score = self.calculate_risk_score(margin_utilization, len(positions), pnl_ratio)
        
        metrics = RiskMetrics(
            total_exposure=total_exposure,
            available_margin=available_margin,
            margin_used=margin_used,
            margin_utilization=margin_utilization,
            total_unrealized_pnl=total_unrealized_pnl,
            total_realized_pnl=total_realized_pnl,
            risk_score=risk_score,
            max_position_size=self._max_position_size(available_margin),
            liquidation_risk=self._liquidation_risk(positions, margin_utilization),
            warnings=self._generate_warnings(positions, margin_utilization, total_unrealized_pnl)
        )
        
        for warning in metrics.warnings:
            self.logger.warning(f"Risk warning: {warning}")
        
        return metrics
    
    def calculate_risk_score(
        self,
        margin_utilization: float,
        position_count: int,
        pnl_ratio: float
    ) -> float:
        """
        Score account risk on a 0-100 scale.
        
        Margin utilization contributes up to 40 points, position count up to
        30, and an aggregate unrealized loss up to 30. Gains never lower the
        score.
        """
        score = min(margin_utilization, 1.0) * 40
        
        if self.limits.max_concurrent_positions > 0:
            score += min(position_count / self.limits.max_concurrent_positions, 1.0) * 30
        elif position_count > 0:
            score += 30
        
        if pnl_ratio < 0:
            score += min(abs(pnl_ratio) * 2, 1.0) * 30
        
        return min(score, 100.0)
    
    @staticmethod
    def _margin_utilization(margin_used: float, account_balance: float) -> float:
        if account_balance > 0:
            return margin_used / account_balance
        return float("inf") if margin_used > 0 else 0.0
    
    def _liquidation_risk(
        self,
        positions: Sequence[Position],
        margin_utilization: float
    ) -> LiquidationRisk:
        high_leverage_count = len([pos for pos in positions if pos.leverage > HIGH_LEVERAGE])
        losing_count = len([pos for pos in positions if pos.unrealized_pnl < 0])
        
        if margin_utilization > 0.9 or high_leverage_count > 2:
            return LiquidationRisk.HIGH
        elif margin_utilization > 0.7 or high_leverage_count > 0 or losing_count > 3:
            return LiquidationRisk.MEDIUM
        else:
            return LiquidationRisk.LOW
    
    def _max_position_size(self, available_margin: float) -> float:
        # Use at most half of the available margin on a new position
        return min(available_margin * 0.5, self.limits.max_position_size)
    
    def _generate_warnings(
        self,
        positions: Sequence[Position],
        margin_utilization: float,
        total_unrealized_pnl: float
    ) -> List[str]:
        warnings = []
        
        if margin_utilization > self.limits.max_margin_utilization:
            warnings.append(f"High margin utilization: {margin_utilization * 100:.1f}%")
        
        if len(positions) > self.limits.max_concurrent_positions:
            warnings.append(f"Too many concurrent positions: {len(positions)}")
        
        high_leverage = [pos for pos in positions if pos.leverage > self.limits.max_leverage_per_position]
        if high_leverage:
            warnings.append(
                f"{len(high_leverage)} position(s) with high leverage "
                f"(>{self.limits.max_leverage_per_position:g}x)"
            )
        
        if total_unrealized_pnl < -self.limits.max_daily_loss:
            warnings.append(f"Large unrealized losses: ${abs(total_unrealized_pnl):.2f}")
        
        at_risk = [pos for pos in positions if pos.margin > 0 and pos.unrealized_pnl / pos.margin < -0.5]
        if at_risk:
            warnings.append(f"{len(at_risk)} position(s) at risk of liquidation")
        
        return warnings
    
    def validate_order(
        self,
        order: Union[OrderRequest, Order],
        positions: Sequence[Position],
        account_balance: float
    ) -> OrderRiskDecision:
        """
        Check an order against the configured limits.
        
        Every violated limit is reported; the order is allowed only when
        none is.
        
        Args:
            order: Order request, must carry quantity and price
            positions: Current open positions
            account_balance: Account balance in account currency
            
        Returns:
            Decision with all violated reasons
        """
        if not order.quantity or not order.price:
            return OrderRiskDecision(allowed=False, reasons=["Invalid order parameters"])
        
        reasons = []
        order_value = order.quantity * order.price
        leverage = order.leverage or 1.0
        required_margin = order_value / leverage
        
        current_margin_used = sum(pos.margin for pos in positions)
        new_margin_utilization = self._margin_utilization(
            current_margin_used + required_margin, account_balance
        )
        
        if new_margin_utilization > self.limits.max_margin_utilization:
            reasons.append(f"Would exceed margin limit ({new_margin_utilization * 100:.1f}%)")
        
        if order_value > self.limits.max_position_size:
            reasons.append(f"Position size too large (max: ${self.limits.max_position_size:,.0f})")
        
        if len(positions) >= self.limits.max_concurrent_positions:
            reasons.append(f"Too many positions (max: {self.limits.max_concurrent_positions})")
        
        if leverage > self.limits.max_leverage_per_position:
            reasons.append(f"Leverage too high (max: {self.limits.max_leverage_per_position:g}x)")
        
        if required_margin > account_balance - current_margin_used:
            reasons.append("Insufficient available margin")
        
        if reasons:
            self.logger.warning(f"Order for {order.symbol} breaches risk limits: {'; '.join(reasons)}")
        
        return OrderRiskDecision(allowed=not reasons, reasons=reasons)
    
    def get_position_recommendations(
        self,
        position: Position,
        current_price: float
    ) -> List[Recommendation]:
        """
        Advisory actions for a position. Rules stack independently.
        
        Args:
            position: Position to assess
            current_price: Current market price for the symbol
            
        Returns:
            List of recommendations, possibly empty
        """
        recommendations = []
        
        pnl_percentage = position.unrealized_pnl / position.margin * 100 if position.margin > 0 else 0.0
        if position.entry_price > 0:
            price_change = (current_price - position.entry_price) / position.entry_price
        else:
            price_change = 0.0
        
        if pnl_percentage < -70:
            recommendations.append(Recommendation(
                action="Close position immediately",
                reason="Position at critical liquidation risk",
                urgency=Urgency.HIGH
            ))
        elif pnl_percentage < -50:
            recommendations.append(Recommendation(
                action="Consider closing position",
                reason="Position at high liquidation risk",
                urgency=Urgency.MEDIUM
            ))
        
        if pnl_percentage > 100:
            recommendations.append(Recommendation(
                action="Consider taking partial profits",
                reason="Position showing strong profits",
                urgency=Urgency.LOW
            ))
        
        if position.leverage > HIGH_LEVERAGE and abs(price_change) > 0.05:
            recommendations.append(Recommendation(
                action="Monitor position closely",
                reason="High leverage position with significant price movement",
                urgency=Urgency.MEDIUM
            ))
        
        return recommendations
    
    def set_risk_limits(self, **overrides: Any) -> None:
        """Merge new limit values into the current limits."""
        self.limits = self.limits.merged(**overrides)
        self.logger.info(f"Risk limits updated: {overrides}")
    
    def get_risk_limits(self) -> RiskLimits:
        return self.limits
