"""Scenario runner that replays configured steps through a trading engine."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional
import pandas as pd
import yaml

from pydantic import ValidationError

from ..config import SimulationConfig, StepConfig
from ..core.clock import Clock
from ..exec.engine import TradingEngine
from ..exec.results import ExecutionFailure
from ..market.schema import OrderRequest
from ..risk.manager import RiskManager
from ..utils.logger import get_logger


class ScenarioRunner:
    """
    Replays a scenario and reports the resulting ledger and risk.

    The runner plays the caller role the engine expects: it owns the
    account balance (initial balance plus net realized PnL) and supplies
    prices on every step.
    """

    def __init__(self, config: SimulationConfig, clock: Optional[Clock] = None):
        """Initialize the scenario runner."""
        self.config = config
        self.logger = get_logger(__name__)

        self.engine = TradingEngine(config.engine, clock=clock)
        self.risk_manager = RiskManager(config.risk.to_limits())
        self.initial_balance = config.account.balance

        # Order ids by order step, None when the step booked nothing
        self.order_ids: List[Optional[str]] = []
        self.last_prices: Dict[str, float] = {}
        self.step_results: List[Dict[str, Any]] = []

    @property
    def balance(self) -> float:
        """Initial balance plus net realized PnL of every position."""
        positions = self.engine.get_positions(include_closed=True)
        return self.initial_balance + sum(pos.net_realized_pnl for pos in positions)

    def run(self) -> Dict[str, Any]:
        """Run every step and return the report."""
        self.logger.info(f"Running scenario {self.config.name or ''} with {len(self.config.steps)} steps")

        for index, step in enumerate(self.config.steps, start=1):
            result = self._run_step(step)
            result["step"] = index
            result["action"] = step.action
            self.step_results.append(result)

        return self.build_report()

    def _run_step(self, step: StepConfig) -> Dict[str, Any]:
        if step.action == "order":
            return self._run_order_step(step)
        elif step.action == "cancel":
            return self._run_cancel_step(step)
        elif step.action == "close":
            return self._run_close_step(step)
        else:
            return self._run_mark_step(step)

    def _run_order_step(self, step: StepConfig) -> Dict[str, Any]:
        try:
            request = OrderRequest(**step.order)
        except ValidationError as e:
            self.order_ids.append(None)
            return {"success": False, "error": f"Invalid order: {e}"}

        if request.symbol:
            self.last_prices[request.symbol] = step.price
        balance = step.balance if step.balance is not None else self.balance

        priced = request.model_copy(update={"price": request.price or step.price})
        decision = self.risk_manager.validate_order(priced, self.engine.get_positions(), balance)
        if self.config.enforce_risk_limits and not decision.allowed:
            self.order_ids.append(None)
            return {
                "success": False,
                "error": "Risk limits: " + "; ".join(decision.reasons),
                "risk_reasons": decision.reasons,
            }

        result = self.engine.execute_order(request, balance, step.price)
        self.order_ids.append(result.order_id)

        output = result.to_dict()
        output["risk_reasons"] = decision.reasons
        if result.order_id is not None:
            output["status"] = self.engine.get_order(result.order_id).status.value
        return output

    def _run_cancel_step(self, step: StepConfig) -> Dict[str, Any]:
        order_id = step.order_id
        if order_id is None:
            if not 1 <= step.order_ref <= len(self.order_ids):
                return {
                    "success": False,
                    "error": f"order_ref {step.order_ref} does not match an earlier order step",
                }
            order_id = self.order_ids[step.order_ref - 1]
        if order_id is None:
            return {"success": False, "error": f"Order step {step.order_ref} booked no order"}

        cancelled = self.engine.cancel_order(order_id)
        output: Dict[str, Any] = {"success": cancelled, "order_id": order_id}
        if not cancelled:
            output["error"] = "Order not found or not pending"
        return output

    def _run_close_step(self, step: StepConfig) -> Dict[str, Any]:
        self.last_prices[step.symbol] = step.price
        position = self.engine.positions.get_open(step.symbol, step.leverage)
        if position is None:
            result = ExecutionFailure(error=f"No open position for {step.symbol} at {step.leverage:g}x")
        else:
            result = self.engine.close_position(position.position_id, step.price)

        output = result.to_dict()
        if position is not None:
            output["position_id"] = position.position_id
            output["realized_pnl"] = position.realized_pnl
        return output

    def _run_mark_step(self, step: StepConfig) -> Dict[str, Any]:
        filled = []
        for symbol, price in step.prices.items():
            self.last_prices[symbol] = price
            filled.extend(self.engine.process_pending_orders(symbol, price))
        updated = self.engine.update_mark_prices(step.prices)
        return {
            "success": True,
            "positions_marked": updated,
            "orders_filled": [result.order_id for result in filled],
        }

    def build_report(self) -> Dict[str, Any]:
        """Assemble the scenario report."""
        open_positions = self.engine.get_positions()
        balance = self.balance
        metrics = self.risk_manager.calculate_risk_metrics(
            open_positions, self.engine.get_orders(), balance
        )

        recommendations = {}
        for position in open_positions:
            current_price = self.last_prices.get(position.symbol, position.mark_price)
            advice = self.risk_manager.get_position_recommendations(position, current_price)
            if advice:
                recommendations[position.position_id] = [item.to_dict() for item in advice]

        return {
            "name": self.config.name,
            "description": self.config.description,
            "initial_balance": self.initial_balance,
            "final_balance": balance,
            "steps": self.step_results,
            "risk_metrics": metrics.to_dict(),
            "recommendations": recommendations,
            "orders": [order.to_dict() for order in self.engine.get_orders()],
            "positions": [pos.to_dict() for pos in self.engine.get_positions(include_closed=True)],
            "trades": [trade.to_dict() for trade in self.engine.get_trades()],
        }

    def save_results(self, results: Dict[str, Any], output_dir: Path) -> None:
        """Save scenario results to files."""
        output_dir.mkdir(parents=True, exist_ok=True)

        with open(output_dir / "config.yaml", "w") as f:
            yaml.safe_dump(self.config.to_dict(), f, sort_keys=False)

        if self.config.report.format in ["json", "both"]:
            with open(output_dir / "report.json", "w") as f:
                json.dump(results, f, indent=2, default=str)

        if self.config.report.format in ["csv", "both"]:
            trades_df = self.engine.get_trade_blotter()
            if not trades_df.empty:
                trades_df.to_csv(output_dir / "trades.csv")

            orders_df = self.engine.get_order_blotter()
            if not orders_df.empty:
                orders_df.to_csv(output_dir / "orders.csv")

            metrics_df = pd.DataFrame([results["risk_metrics"]])
            metrics_df["warnings"] = metrics_df["warnings"].apply("; ".join)
            metrics_df.to_csv(output_dir / "risk_metrics.csv", index=False)

        self.logger.info(f"Results saved to {output_dir}")
