"""Maturity Selector — отбор target-бакетов для нового капитала

Из полного списка maturities рынка выбирает не более max_buckets бакетов,
сохраняя порядок рынка (по возрастанию maturity). Бакет допускается, если:
- maturity > now + exclusion_window
- рынок бакета открыт (is_opened)
- бакет не в фазе opening auction
- бакет не в фазе pre-order only

Сканирование останавливается, как только найдено max_buckets бакетов или
список maturities исчерпан. Maturity без order book — InvariantViolation
(через MarketView.bucket), а не тихий пропуск.
"""

from dataclasses import dataclass

from src.core.domain.maturity import MaturityBucket
from src.core.math.numerical_safeguards import validate_non_negative, validate_positive
from src.market.view import MarketView


# =============================================================================
# SKIP REASONS
# =============================================================================

SKIP_EXCLUSION_WINDOW = "within_exclusion_window"
SKIP_NOT_OPENED = "market_not_opened"
SKIP_OPENING_AUCTION = "opening_auction_period"
SKIP_PRE_ORDER_ONLY = "pre_order_only_period"


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class MaturitySelection:
    """Результат отбора target-бакетов."""

    buckets: tuple[MaturityBucket, ...]
    skipped: tuple[tuple[int, str], ...]  # (maturity, reason)

    # Детали
    details: str

    @property
    def maturities(self) -> tuple[int, ...]:
        return tuple(b.maturity for b in self.buckets)


# =============================================================================
# SELECTOR
# =============================================================================


class MaturitySelector:
    """Отбор до max_buckets торгуемых бакетов за пределами окна исключения."""

    def __init__(self, view: MarketView, max_buckets: int):
        validate_positive(max_buckets, "max_buckets")
        self.view = view
        self.max_buckets = max_buckets

    def select(self, now: int, exclusion_window_sec: int) -> MaturitySelection:
        """
        Отбор target-бакетов.

        Args:
            now: Текущее время (Unix seconds), читается вызывающим один раз
            exclusion_window_sec: Окно исключения (секунды)

        Returns:
            MaturitySelection с бакетами в порядке рынка (len <= max_buckets)
        """
        validate_non_negative(exclusion_window_sec, "exclusion_window_sec")

        threshold = now + exclusion_window_sec
        selected: list[MaturityBucket] = []
        skipped: list[tuple[int, str]] = []

        for maturity in self.view.maturities():
            if len(selected) >= self.max_buckets:
                break

            if maturity <= threshold:
                skipped.append((maturity, SKIP_EXCLUSION_WINDOW))
                continue

            bucket = self.view.bucket(maturity)
            reason = self._phase_block_reason(bucket)
            if reason:
                skipped.append((maturity, reason))
                continue

            selected.append(bucket)

        return MaturitySelection(
            buckets=tuple(selected),
            skipped=tuple(skipped),
            details=(
                f"selected={[b.maturity for b in selected]}, "
                f"skipped={len(skipped)}, threshold={threshold}"
            ),
        )

    def _phase_block_reason(self, bucket: MaturityBucket) -> str:
        """Причина, по которой фаза рынка блокирует бакет ("" если не блокирует)."""
        book = self.view.order_book
        if not book.is_opened(bucket.book_id):
            return SKIP_NOT_OPENED
        if book.is_opening_auction_period(bucket.book_id):
            return SKIP_OPENING_AUCTION
        if book.is_pre_order_only_period(bucket.book_id):
            return SKIP_PRE_ORDER_ONLY
        return ""
