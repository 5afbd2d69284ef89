# storefront/utils/retry.py
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    wait_fixed,
    retry_if_exception_type,
    retry_if_result,
)
import redis


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )


def status_poll(attempts: int, delay: float, is_pending):
    """
    Powtarza wywolanie dopoki is_pending(wynik) jest True.
    Stala liczba prob i staly odstep, bez backoffu.
    Po wyczerpaniu prob zwraca ostatni wynik zamiast rzucac wyjatek.
    """
    return retry(
        stop=stop_after_attempt(attempts),
        wait=wait_fixed(delay),
        retry=retry_if_result(is_pending),
        retry_error_callback=lambda state: state.outcome.result(),
    )
