# storefront/utils/retry.py
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
from sqlalchemy.exc import IntegrityError

from storefront.utils.settings import NUMBER_RETRY_ATTEMPTS


#jedyne miejsce z automatycznym retry - kolizja numeru zamowienia/oferty (unique)
#reszta bledow konczy request
def unique_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(NUMBER_RETRY_ATTEMPTS),
        wait=wait_exponential(multiplier=0.01, min=0.01, max=0.2),
        retry=retry_if_exception_type(IntegrityError),
    )
