"""Allocation Splitter — распределение капитала по target-бакетам по весам

amount[i] = total * weight[i] // sum(weight[0..k])  для i < k-1
amount[k-1] = total - Σ amount[0..k-2]              (точный остаток)

Используются только первые k весов. Сумма результата всегда в точности
равна total: капитал не теряется на округлении floor-деления.
"""

from typing import Sequence

from src.core.math.numerical_safeguards import mul_div, validate_non_negative, validate_positive


def split_allocation(total: int, weights: Sequence[int], bucket_count: int) -> tuple[int, ...]:
    """
    Разбиение капитала на bucket_count частей по первым весам.

    Args:
        total: Капитал к распределению (>= 0)
        weights: Сконфигурированные веса (все > 0)
        bucket_count: Число eligible бакетов k (0 <= k <= len(weights))

    Returns:
        Кортеж из k сумм, Σ == total (при k > 0); нулевой вектор при total == 0

    Raises:
        ValueError: Если k > len(weights), вес не положителен или total < 0

    Examples:
        >>> split_allocation(1_000_000, (4, 6), 2)
        (400000, 600000)
        >>> split_allocation(100, (1, 1, 1), 3)
        (33, 33, 34)
        >>> split_allocation(0, (4, 6), 2)
        (0, 0)
    """
    validate_non_negative(total, "total")
    validate_non_negative(bucket_count, "bucket_count")

    if bucket_count > len(weights):
        raise ValueError(
            f"bucket_count {bucket_count} exceeds configured weights {len(weights)}"
        )

    if bucket_count == 0:
        return ()

    active = weights[:bucket_count]
    for i, w in enumerate(active):
        validate_positive(w, f"weight[{i}]")

    if total == 0:
        return (0,) * bucket_count

    weight_sum = sum(active)
    amounts = [mul_div(total, w, weight_sum) for w in active[:-1]]
    # Последний бакет получает точный остаток
    amounts.append(total - sum(amounts))

    return tuple(amounts)
