# app/core/kis.py
"""
Korea Investment & Securities (KIS) Open API client.

Covers the four calls the app needs: token issue, account list, stock
holdings and a single stock quote. Every call picks the live or the
sandbox ("virtual") host from the `is_virtual` flag of the connection.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)

TOKEN_PATH = "/oauth2/tokenP"
ACCOUNTS_PATH = "/uapi/domestic-stock/v1/trading/inquire-balance-ccld"
HOLDINGS_PATH = "/uapi/domestic-stock/v1/trading/inquire-balance"
PRICE_PATH = "/uapi/domestic-stock/v1/quotations/inquire-price"

# Transaction ids: (live, sandbox)
TR_ACCOUNTS = ("TTTC8436R", "VTTC8436R")
TR_HOLDINGS = ("TTTC8434R", "VTTC8434R")
TR_PRICE = ("FHKST01010100", "FHKST01010100")


class KisApiError(Exception):
    """The broker could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class KisAccountNumberError(ValueError):
    pass


@dataclass
class KisToken:
    access_token: str
    token_type: str
    expires_in: int
    access_token_token_expired: Optional[str] = None


@dataclass
class KisAccount:
    account_number: str
    account_name: str
    balance: float
    available_balance: float


@dataclass
class KisHolding:
    stock_code: str
    stock_name: str
    quantity: int
    average_price: float
    current_price: float
    total_value: float
    profit_loss: float
    profit_loss_percent: float


@dataclass
class KisPrice:
    stock_code: str
    stock_name: str
    current_price: float
    change: float
    change_percent: float
    volume: int
    high_price: float
    low_price: float


def parse_account_number(account_number: str) -> Tuple[str, str]:
    """
    Split an account number into (CANO, ACNT_PRDT_CD).

    Accepts "12345678-01" and "1234567801". The product code defaults to
    "01" and is zero padded to two digits; CANO must be exactly 8 digits.
    """
    cleaned = "".join((account_number or "").split())
    if "-" in cleaned:
        cano, _, product = cleaned.partition("-")
    else:
        cano, product = cleaned[:8], cleaned[8:10]
    product = (product or "01").zfill(2)

    if len(cano) != 8 or not cano.isdigit():
        raise KisAccountNumberError(
            f"Account number must start with exactly 8 digits (got {cano!r})"
        )
    return cano, product


def _to_float(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _to_int(value: Any) -> int:
    return int(_to_float(value))


class KisClient:
    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        self._client = httpx.AsyncClient(
            transport=transport,
            timeout=timeout if timeout is not None else settings.KIS_TIMEOUT_SECONDS,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    @staticmethod
    def base_url(is_virtual: bool) -> str:
        return settings.KIS_VIRTUAL_BASE_URL if is_virtual else settings.KIS_LIVE_BASE_URL

    @staticmethod
    def _auth_headers(access_token: str, app_key: str, app_secret: str, tr_id: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json; charset=utf-8",
            "authorization": f"Bearer {access_token}",
            "appkey": app_key,
            "appsecret": app_secret,
            "tr_id": tr_id,
        }

    async def _request(self, method: str, url: str, action: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"KIS {action} request failed: {str(e)}")
            raise KisApiError(f"{action} failed: {str(e)}") from e

        if response.status_code >= 400:
            logger.error(f"KIS {action} failed: {response.status_code} {response.text}")
            raise KisApiError(
                f"{action} failed: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise KisApiError(f"{action} returned an invalid response") from e

        if data.get("rt_cd") and data["rt_cd"] != "0":
            message = data.get("msg1") or data.get("msg_cd") or "unknown error"
            logger.error(f"KIS {action} error response: {data}")
            raise KisApiError(f"KIS API error: {message}")
        return data

    async def issue_token(self, app_key: str, app_secret: str, is_virtual: bool = False) -> KisToken:
        if not app_key or not app_secret:
            raise KisApiError("App key and app secret are required")
        data = await self._request(
            "POST",
            f"{self.base_url(is_virtual)}{TOKEN_PATH}",
            "token issue",
            json={"grant_type": "client_credentials", "appkey": app_key, "appsecret": app_secret},
        )
        if not data.get("access_token"):
            raise KisApiError("Token response did not contain an access token")
        return KisToken(
            access_token=data["access_token"],
            token_type=data.get("token_type", "Bearer"),
            expires_in=_to_int(data.get("expires_in")),
            access_token_token_expired=data.get("access_token_token_expired"),
        )

    async def get_accounts(
        self, access_token: str, app_key: str, app_secret: str, is_virtual: bool = False
    ) -> List[KisAccount]:
        data = await self._request(
            "GET",
            f"{self.base_url(is_virtual)}{ACCOUNTS_PATH}",
            "account lookup",
            headers=self._auth_headers(access_token, app_key, app_secret, TR_ACCOUNTS[is_virtual]),
        )
        accounts = []
        for item in data.get("output") or []:
            if item.get("canl_istt_yn") == "Y":
                number = f"{item.get('canl_no', '')}-{item.get('acnt_prdt_cd', '')}"
            else:
                number = item.get("acnt_no", "")
            accounts.append(KisAccount(
                account_number=number,
                account_name=item.get("acnt_name") or "",
                balance=_to_float(item.get("dnca_tot_amt")),
                available_balance=_to_float(item.get("ord_psbl_cash")),
            ))
        return accounts

    async def get_holdings(
        self,
        access_token: str,
        app_key: str,
        app_secret: str,
        account_number: str,
        is_virtual: bool = False,
    ) -> List[KisHolding]:
        cano, product = parse_account_number(account_number)
        params = {
            "CANO": cano,
            "ACNT_PRDT_CD": product,
            "AFHR_FLPR_YN": "N",
            "OFL_YN": "",
            "INQR_DVSN": "02",
            "UNPR_DVSN": "01",
            "FUND_STTL_ICLD_YN": "N",
            "FNCG_AMT_AUTO_RDPT_YN": "N",
            "PRCS_DVSN": "01",
            "CTX_AREA_FK100": "",
            "CTX_AREA_NK100": "",
        }
        # The balance inquiry is a POST with its parameters in the query string
        data = await self._request(
            "POST",
            f"{self.base_url(is_virtual)}{HOLDINGS_PATH}",
            "holdings lookup",
            params=params,
            headers=self._auth_headers(access_token, app_key, app_secret, TR_HOLDINGS[is_virtual]),
        )
        return [
            KisHolding(
                stock_code=item.get("pdno") or "",
                stock_name=item.get("prdt_name") or "",
                quantity=_to_int(item.get("hldg_qty")),
                average_price=_to_float(item.get("pchs_avg_pric")),
                current_price=_to_float(item.get("prpr")),
                total_value=_to_float(item.get("evlu_amt")),
                profit_loss=_to_float(item.get("evlu_pfls_amt")),
                profit_loss_percent=_to_float(item.get("evlu_pfls_rt")),
            )
            for item in data.get("output1") or []
        ]

    async def get_price(
        self,
        access_token: str,
        app_key: str,
        app_secret: str,
        stock_code: str,
        is_virtual: bool = False,
    ) -> KisPrice:
        data = await self._request(
            "GET",
            f"{self.base_url(is_virtual)}{PRICE_PATH}",
            "price lookup",
            params={"FID_COND_MRKT_DIV_CODE": "J", "FID_INPUT_ISCD": stock_code},
            headers=self._auth_headers(access_token, app_key, app_secret, TR_PRICE[is_virtual]),
        )
        output = data.get("output") or {}
        current = _to_float(output.get("stck_prpr"))
        previous_close = _to_float(output.get("prdy_clpr"))
        change = current - previous_close
        return KisPrice(
            stock_code=stock_code,
            stock_name=output.get("hts_kor_isnm") or "",
            current_price=current,
            change=change,
            change_percent=(change / previous_close * 100) if previous_close > 0 else 0.0,
            volume=_to_int(output.get("acml_vol")),
            high_price=_to_float(output.get("stck_hgpr")),
            low_price=_to_float(output.get("stck_lwpr")),
        )
