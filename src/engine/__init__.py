"""Engine — операции стратегии поверх рынка.

- deployment: cancel-and-replace лесенок в target-бакетах
- fund_recovery: waterfall освобождения капитала (cancel → capped unwind)
- rebalance_trigger: pull-based решение о tend()
- withdrawal_limit: read-only оценка доступного вывода
- valuation: снимок ledger-а капитала
- strategy: MaturityAllocationStrategy — фиксированный набор операций
"""

from .deployment import BucketDeployment, DeploymentOrchestrator, DeploymentReport
from .fund_recovery import FundRecoveryEngine, RecoveryResult
from .rebalance_trigger import RATE_DRIFT_THRESHOLD_BPS, RebalanceTrigger, TriggerDecision
from .strategy import AllocationStrategy, MaturityAllocationStrategy
from .valuation import ValuationEngine
from .withdrawal_limit import WithdrawalLimitEstimator

__all__ = [
    # Deployment
    "BucketDeployment",
    "DeploymentOrchestrator",
    "DeploymentReport",
    # Recovery
    "FundRecoveryEngine",
    "RecoveryResult",
    # Trigger
    "RATE_DRIFT_THRESHOLD_BPS",
    "RebalanceTrigger",
    "TriggerDecision",
    # Valuation / limits
    "ValuationEngine",
    "WithdrawalLimitEstimator",
    # Strategy
    "AllocationStrategy",
    "MaturityAllocationStrategy",
]
