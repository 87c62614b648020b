from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

ExtractionStatus = Literal["found", "not_found", "timeout", "skipped"]


class OperationResult(BaseModel):
    transaction_id: str
    operation: str
    created_address: str | None = None
    # "skipped" for operations that create nothing worth extracting.
    extraction_status: ExtractionStatus = "skipped"


class OperationBase(BaseModel):
    label: str | None = None


class TRANSFER(OperationBase):
    type: Literal["TRANSFER"] = "TRANSFER"
    to_account: str
    amount: str
    resource_address: str | None = None


class STAKE(OperationBase):
    type: Literal["STAKE"] = "STAKE"
    validator_address: str
    amount: str


class UNSTAKE(OperationBase):
    type: Literal["UNSTAKE"] = "UNSTAKE"
    validator_address: str
    amount: str


class CLAIM(OperationBase):
    type: Literal["CLAIM"] = "CLAIM"
    validator_address: str


class CREATE_POOL(OperationBase):
    type: Literal["CREATE_POOL"] = "CREATE_POOL"
    variant: Literal["standard", "imbalanced", "hooked"] = "standard"
    resource_address_1: str
    resource_address_2: str
    amount_1: str
    amount_2: str
    fee_tier: int = 30
    asset_ratio: list[int] | None = None
    hook_address: str | None = None


class ADD_LIQUIDITY(OperationBase):
    type: Literal["ADD_LIQUIDITY"] = "ADD_LIQUIDITY"
    pool_address: str
    amount_1: str
    amount_2: str


class REMOVE_LIQUIDITY(OperationBase):
    type: Literal["REMOVE_LIQUIDITY"] = "REMOVE_LIQUIDITY"
    pool_address: str
    amount_lp: str
    min_amount_1: str | None = None
    min_amount_2: str | None = None


class SWAP(OperationBase):
    type: Literal["SWAP"] = "SWAP"
    pool_address: str
    from_resource_address: str
    to_resource_address: str
    amount_in: str
    min_amount_out: str | None = None


class FLASH_LOAN(OperationBase):
    type: Literal["FLASH_LOAN"] = "FLASH_LOAN"
    pool_address: str
    resource_address: str
    amount: str
    callback_component_address: str
    callback_data: str = ""


class CREATE_FUNGIBLE(OperationBase):
    type: Literal["CREATE_FUNGIBLE"] = "CREATE_FUNGIBLE"
    name: str
    symbol: str
    initial_supply: str
    divisibility: int = 18
    description: str | None = None
    icon_url: str | None = None
    metadata: dict[str, Any] | None = None


class CREATE_NON_FUNGIBLE(OperationBase):
    type: Literal["CREATE_NON_FUNGIBLE"] = "CREATE_NON_FUNGIBLE"
    name: str
    description: str | None = None
    icon_url: str | None = None
    id_type: str = "Integer"
    metadata: dict[str, Any] | None = None


class MINT_FUNGIBLE(OperationBase):
    type: Literal["MINT_FUNGIBLE"] = "MINT_FUNGIBLE"
    resource_address: str
    amount: str
    to_account: str | None = None
    badge_address: str | None = None


class MINT_NON_FUNGIBLE(OperationBase):
    type: Literal["MINT_NON_FUNGIBLE"] = "MINT_NON_FUNGIBLE"
    resource_address: str
    nft_data: dict[str, Any] = {}
    nft_id: int | str | None = None
    to_account: str | None = None
    badge_address: str | None = None


class CALL_METHOD(OperationBase):
    type: Literal["CALL_METHOD"] = "CALL_METHOD"
    component_address: str
    method_name: str
    args: list[Any] = []


OperationRequest = (
    TRANSFER
    | STAKE
    | UNSTAKE
    | CLAIM
    | CREATE_POOL
    | ADD_LIQUIDITY
    | REMOVE_LIQUIDITY
    | SWAP
    | FLASH_LOAN
    | CREATE_FUNGIBLE
    | CREATE_NON_FUNGIBLE
    | MINT_FUNGIBLE
    | MINT_NON_FUNGIBLE
    | CALL_METHOD
)


class OPERATION(BaseModel):
    request: Annotated[OperationRequest, Field(discriminator="type")]
