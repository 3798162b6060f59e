"""Solana RPC client with fallback support."""
import logging
import ssl
from typing import Any

import aiohttp
import certifi
from solders.pubkey import Pubkey

from ...config import ChainConfig

logger = logging.getLogger(__name__)


class SolanaClient:
    """Solana JSON-RPC client with automatic endpoint fallback."""

    def __init__(self, config: ChainConfig) -> None:
        self.endpoints = list(config.rpc_endpoints)
        self.timeout = config.rpc_timeout
        self.current_rpc_index = 0

    async def rpc_call(self, method: str, params: list[Any]) -> Any:
        """Make RPC call with fallback to alternative endpoints."""
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}

        ssl_context = ssl.create_default_context(cafile=certifi.where())

        last_error: Exception | None = None
        for attempt in range(len(self.endpoints)):
            rpc_index = (self.current_rpc_index + attempt) % len(self.endpoints)
            rpc_url = self.endpoints[rpc_index]

            try:
                connector = aiohttp.TCPConnector(ssl=ssl_context)
                async with aiohttp.ClientSession(connector=connector) as session:
                    async with session.post(
                        rpc_url,
                        json=payload,
                        timeout=aiohttp.ClientTimeout(total=self.timeout),
                    ) as response:
                        result = await response.json()
                        if "error" in result:
                            raise RuntimeError(f"RPC Error: {result['error']}")

                        if rpc_index != self.current_rpc_index:
                            logger.info("Switched to RPC endpoint: %s", rpc_url)
                            self.current_rpc_index = rpc_index

                        return result.get("result")
            except Exception as e:
                last_error = e
                logger.warning("RPC endpoint %s failed: %s", rpc_url, e)
                if attempt < len(self.endpoints) - 1:
                    logger.info("Trying next endpoint...")
                continue

        raise RuntimeError(f"All RPC endpoints failed. Last error: {last_error}")

    async def get_token_account_balance(self, token_account: Pubkey) -> int:
        """Raw token amount held by ``token_account``; 0 if it cannot be read."""
        try:
            result = await self.rpc_call("getTokenAccountBalance", [str(token_account)])
            return int(result["value"]["amount"])
        except Exception as e:
            logger.error("Error fetching balance of %s: %s", token_account, e)
            return 0

    async def get_account_exists(self, address: Pubkey) -> bool:
        """Whether an account is allocated at ``address``."""
        result = await self.rpc_call(
            "getAccountInfo", [str(address), {"encoding": "base64"}]
        )
        return bool(result) and result.get("value") is not None
