"""
Minimal ABIs for the contracts the client talks to.

Only the functions and events used by readers and actions are declared.
"""

from typing import Dict, List, Sequence, Tuple

Param = Tuple[str, str]


def _params(params: Sequence[Param]) -> List[Dict]:
    return [{"name": name, "type": type_} for type_, name in params]


def _fn(
    name: str,
    inputs: Sequence[Param] = (),
    outputs: Sequence[Param] = (),
    mutability: str = "view",
) -> Dict:
    return {
        "type": "function",
        "name": name,
        "inputs": _params(inputs),
        "outputs": _params(outputs),
        "stateMutability": mutability,
    }


def _event(name: str, inputs: Sequence[Tuple[str, str, bool]]) -> Dict:
    return {
        "type": "event",
        "name": name,
        "anonymous": False,
        "inputs": [
            {"name": arg, "type": type_, "indexed": indexed}
            for type_, arg, indexed in inputs
        ],
    }


SUBSCRIPTION_ABI = [
    _fn("contractURI", outputs=[("string", "")]),
    _fn("tokenURI", [("uint256", "tokenId")], [("string", "")]),
    _fn("owner", outputs=[("address", "")]),
    _fn("totalSupply", outputs=[("uint256", "")]),
    _fn("tokenByIndex", [("uint256", "index")], [("uint256", "")]),
    _fn("balanceOf", [("address", "owner")], [("uint256", "")]),
    _fn("tokenOfOwnerByIndex", [("address", "owner"), ("uint256", "index")], [("uint256", "")]),
    _fn("ownerOf", [("uint256", "tokenId")], [("address", "")]),
    _fn(
        "mint",
        [("uint256", "amount"), ("uint24", "multiplier"), ("string", "message")],
        mutability="nonpayable",
    ),
    _fn(
        "renew",
        [("uint256", "tokenId"), ("uint256", "amount"), ("string", "message")],
        mutability="nonpayable",
    ),
    _fn("withdraw", [("uint256", "tokenId"), ("uint256", "amount")], mutability="nonpayable"),
    _fn("cancel", [("uint256", "tokenId")], mutability="nonpayable"),
    _fn(
        "tip",
        [("uint256", "tokenId"), ("uint256", "amount"), ("string", "message")],
        mutability="nonpayable",
    ),
    _fn("claim", [("address", "to")], mutability="nonpayable"),
    _fn("setFlags", [("uint256", "flags")], mutability="nonpayable"),
    _fn("setDescription", [("string", "description")], mutability="nonpayable"),
    _fn("setImage", [("string", "image")], mutability="nonpayable"),
    _fn("setExternalUrl", [("string", "externalUrl")], mutability="nonpayable"),
    _event("Transfer", [
        ("address", "from", True),
        ("address", "to", True),
        ("uint256", "tokenId", True),
    ]),
    _event("SubscriptionRenewed", [
        ("uint256", "tokenId", True),
        ("uint256", "addedAmount", False),
        ("uint256", "deposited", False),
        ("address", "depositor", True),
        ("string", "message", False),
    ]),
    _event("SubscriptionWithdrawn", [
        ("uint256", "tokenId", True),
        ("uint256", "removedAmount", False),
        ("uint256", "withdrawn", False),
    ]),
    _event("Tipped", [
        ("uint256", "tokenId", True),
        ("uint256", "amount", False),
        ("address", "sender", True),
        ("string", "message", False),
    ]),
    _event("FundsClaimed", [("uint256", "amount", False), ("uint256", "totalClaimed", False)]),
    _event("FlagsUpdated", [("uint256", "flags", False)]),
    _event("ContractURIUpdated", []),
]

ERC20_ABI = [
    _fn("name", outputs=[("string", "")]),
    _fn("symbol", outputs=[("string", "")]),
    _fn("decimals", outputs=[("uint8", "")]),
    _fn("balanceOf", [("address", "account")], [("uint256", "")]),
    _fn("allowance", [("address", "owner"), ("address", "spender")], [("uint256", "")]),
    _fn(
        "approve",
        [("address", "spender"), ("uint256", "value")],
        [("bool", "")],
        mutability="nonpayable",
    ),
    _event("Approval", [
        ("address", "owner", True),
        ("address", "spender", True),
        ("uint256", "value", False),
    ]),
]

AGGREGATOR_V3_ABI = [
    _fn("decimals", outputs=[("uint8", "")]),
    _fn(
        "latestRoundData",
        outputs=[
            ("uint80", "roundId"),
            ("int256", "answer"),
            ("uint256", "startedAt"),
            ("uint256", "updatedAt"),
            ("uint80", "answeredInRound"),
        ],
    ),
]

_ERC6551_ACCOUNT_ARGS = [
    ("address", "implementation"),
    ("bytes32", "salt"),
    ("uint256", "chainId"),
    ("address", "tokenContract"),
    ("uint256", "tokenId"),
]

ERC6551_REGISTRY_ABI = [
    _fn("account", _ERC6551_ACCOUNT_ARGS, [("address", "")]),
    _fn("createAccount", _ERC6551_ACCOUNT_ARGS, [("address", "")], mutability="nonpayable"),
    _event("ERC6551AccountCreated", [
        ("address", "account", False),
        ("address", "implementation", True),
        ("bytes32", "salt", False),
        ("uint256", "chainId", False),
        ("address", "tokenContract", True),
        ("uint256", "tokenId", True),
    ]),
]

ERC6551_ACCOUNT_ABI = [
    _fn("state", outputs=[("uint256", "")]),
    _fn("isValidSigner", [("address", "signer"), ("bytes", "context")], [("bytes4", "")]),
    _fn("token", outputs=[("uint256", "chainId"), ("address", "tokenContract"), ("uint256", "tokenId")]),
]

ERC6551_EXECUTABLE_ABI = [
    _fn(
        "execute",
        [("address", "to"), ("uint256", "value"), ("bytes", "data"), ("uint8", "operation")],
        [("bytes", "")],
        mutability="payable",
    ),
]
