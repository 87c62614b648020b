import dataclasses
from decimal import Decimal

import pytest

from radix_agent_kit.core.constants.networks import NETWORKS, ExchangeConfig
from radix_agent_kit.core.errors import NetworkUnsupportedError, ValidationError
from radix_agent_kit.core.manifest.templates import (
    add_liquidity_manifest,
    call_method_manifest,
    claim_manifest,
    create_fungible_manifest,
    create_non_fungible_manifest,
    create_pool_manifest,
    faucet_manifest,
    flash_loan_manifest,
    metadata_init,
    mint_fungible_manifest,
    mint_non_fungible_manifest,
    remove_liquidity_manifest,
    stake_manifest,
    swap_manifest,
    transfer_manifest,
    unstake_manifest,
    validate_fee_tier,
    validate_pool_weights,
)
from radix_agent_kit.tests.test_utils import (
    ACCOUNT_A,
    ACCOUNT_B,
    BADGE,
    CLAIM_NFT,
    COMPONENT,
    EXCHANGE_PACKAGE,
    HOOK,
    LP_TOKEN,
    POOL,
    RESOURCE_1,
    RESOURCE_2,
    STAKE_UNIT,
    STOKENET,
    VALIDATOR,
    XRD,
)


class TestTransfer:
    def test_transfer_renders_withdraw_bucket_deposit(self):
        manifest = transfer_manifest(
            from_account=ACCOUNT_A,
            to_account=ACCOUNT_B,
            resource_address=XRD,
            amount="150",
        )

        assert manifest.render() == (
            "CALL_METHOD\n"
            f'    Address("{ACCOUNT_A}")\n'
            '    "lock_fee"\n'
            '    Decimal("10")\n'
            ";\n"
            "CALL_METHOD\n"
            f'    Address("{ACCOUNT_A}")\n'
            '    "withdraw"\n'
            f'    Address("{XRD}")\n'
            '    Decimal("150")\n'
            ";\n"
            "TAKE_FROM_WORKTOP\n"
            f'    Address("{XRD}")\n'
            '    Decimal("150")\n'
            '    Bucket("bucket1")\n'
            ";\n"
            "CALL_METHOD\n"
            f'    Address("{ACCOUNT_B}")\n'
            '    "try_deposit_or_abort"\n'
            '    Bucket("bucket1")\n'
            "    None\n"
            ";\n"
        )

    def test_transfer_has_exactly_one_withdraw_and_no_creation(self):
        manifest = transfer_manifest(
            from_account=ACCOUNT_A,
            to_account=ACCOUNT_B,
            resource_address=XRD,
            amount=Decimal("150"),
        )
        calls = manifest.method_calls()

        assert calls.count((ACCOUNT_A, "withdraw")) == 1
        assert calls[-1] == (ACCOUNT_B, "try_deposit_or_abort")
        assert not any(name.startswith("CREATE_") for name in manifest.instruction_names())

    @pytest.mark.parametrize("amount", ["0", "-1", "abc", None])
    def test_transfer_rejects_bad_amount(self, amount):
        with pytest.raises(ValidationError):
            transfer_manifest(
                from_account=ACCOUNT_A,
                to_account=ACCOUNT_B,
                resource_address=XRD,
                amount=amount,
            )


class TestStaking:
    def test_stake(self):
        manifest = stake_manifest(
            account=ACCOUNT_A, validator_address=VALIDATOR, xrd_address=XRD, amount="100"
        )
        assert manifest.method_calls() == [
            (ACCOUNT_A, "lock_fee"),
            (ACCOUNT_A, "withdraw"),
            (VALIDATOR, "stake"),
            (ACCOUNT_A, "try_deposit_batch_or_abort"),
        ]
        assert 'Expression("ENTIRE_WORKTOP")' in manifest.render()

    def test_unstake_withdraws_stake_units(self):
        manifest = unstake_manifest(
            account=ACCOUNT_A,
            validator_address=VALIDATOR,
            stake_unit_address=STAKE_UNIT,
            amount="5",
        )
        text = manifest.render()
        assert (VALIDATOR, "unstake") in manifest.method_calls()
        assert f'Address("{STAKE_UNIT}")' in text
        assert f'Address("{XRD}")' not in text

    def test_claim_with_receipts(self):
        manifest = claim_manifest(
            account=ACCOUNT_A,
            validator_address=VALIDATOR,
            claim_nft_address=CLAIM_NFT,
            claim_nft_ids=["#1#", 2],
        )
        text = manifest.render()
        assert (ACCOUNT_A, "withdraw_non_fungibles") in manifest.method_calls()
        assert "TAKE_ALL_FROM_WORKTOP" in manifest.instruction_names()
        assert 'NonFungibleLocalId("#1#")' in text
        assert 'NonFungibleLocalId("#2#")' in text
        assert (VALIDATOR, "claim_xrd") in manifest.method_calls()

    def test_claim_without_receipts_falls_back_to_direct_claim(self):
        manifest = claim_manifest(account=ACCOUNT_A, validator_address=VALIDATOR)
        text = manifest.render()
        assert (VALIDATOR, "claim_xrd") in manifest.method_calls()
        assert (ACCOUNT_A, "withdraw") not in manifest.method_calls()
        assert (
            "CALL_METHOD\n"
            f'    Address("{VALIDATOR}")\n'
            '    "claim_xrd"\n'
            f'    Address("{ACCOUNT_A}")\n'
            ";"
        ) in text


class TestResourceCreation:
    def test_fungible_with_default_divisibility(self):
        manifest = create_fungible_manifest(
            owner_account=ACCOUNT_A,
            name="LocalTestCoin",
            symbol="ltc",
            initial_supply=500000,
        )
        text = manifest.render()

        assert "CREATE_FUNGIBLE_RESOURCE_WITH_INITIAL_SUPPLY" in manifest.instruction_names()
        assert "    18u8\n" in text
        assert 'Decimal("500000")' in text
        assert '"name" => Tuple(Some(Enum<Metadata::String>("LocalTestCoin")), true)' in text
        assert '"symbol" => Tuple(Some(Enum<Metadata::String>("LTC")), true)' in text
        assert manifest.method_calls()[-1] == (ACCOUNT_A, "try_deposit_batch_or_abort")

    def test_fungible_custom_divisibility_and_badge(self):
        manifest = create_fungible_manifest(
            owner_account=ACCOUNT_A,
            name="Coin",
            symbol="CN",
            initial_supply="1.5",
            divisibility=6,
            minter_badge_address=BADGE,
        )
        text = manifest.render()
        assert "    6u8\n" in text
        assert 'Decimal("1.5")' in text
        assert "Enum<AccessRule::Protected>" in text
        assert f'Address("{BADGE}")' in text

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"name": "", "symbol": "X", "initial_supply": "1"},
            {"name": "Coin", "symbol": " ", "initial_supply": "1"},
            {"name": "Coin", "symbol": "X", "initial_supply": "0"},
            {"name": "Coin", "symbol": "X", "initial_supply": "1", "divisibility": 19},
            {"name": "Coin", "symbol": "X", "initial_supply": "1", "divisibility": -1},
        ],
    )
    def test_fungible_rejects_bad_input(self, kwargs):
        with pytest.raises(ValidationError):
            create_fungible_manifest(owner_account=ACCOUNT_A, **kwargs)

    def test_url_metadata_is_typed_as_url(self):
        text = metadata_init({"icon_url": "https://example.com/i.png", "skip": None}).render()
        assert 'Enum<Metadata::Url>("https://example.com/i.png")' in text
        assert "skip" not in text

    def test_non_fungible_collection(self):
        manifest = create_non_fungible_manifest(
            owner_account=ACCOUNT_A, name="Badges", id_type="String"
        )
        text = manifest.render()
        assert manifest.instruction_names()[-1] == "CREATE_NON_FUNGIBLE_RESOURCE"
        assert "Enum<NonFungibleIdType::String>()" in text

    def test_non_fungible_rejects_unknown_id_type(self):
        with pytest.raises(ValidationError):
            create_non_fungible_manifest(
                owner_account=ACCOUNT_A, name="Badges", id_type="Uuid"
            )


class TestMinting:
    def test_mint_fungible_with_badge_proof(self):
        manifest = mint_fungible_manifest(
            account=ACCOUNT_A,
            resource_address=RESOURCE_1,
            amount="42",
            to_account=ACCOUNT_B,
            badge_address=BADGE,
        )
        assert manifest.instruction_names() == [
            "CALL_METHOD",
            "CALL_METHOD",
            "MINT_FUNGIBLE",
            "CALL_METHOD",
        ]
        assert manifest.method_calls()[1] == (ACCOUNT_A, "create_proof_of_amount")
        assert manifest.method_calls()[-1] == (ACCOUNT_B, "try_deposit_batch_or_abort")

    def test_mint_non_fungible_data_tuple(self):
        manifest = mint_non_fungible_manifest(
            account=ACCOUNT_A,
            resource_address=RESOURCE_1,
            nft_id=5,
            data={"name": "gold", "power": 3},
        )
        assert (
            'Map<NonFungibleLocalId, Tuple>(NonFungibleLocalId("#5#") => '
            'Tuple(Tuple("gold", 3u32)))'
        ) in manifest.render()

    def test_mint_non_fungible_string_id(self):
        manifest = mint_non_fungible_manifest(
            account=ACCOUNT_A, resource_address=RESOURCE_1, nft_id="hero"
        )
        assert 'NonFungibleLocalId("<hero>")' in manifest.render()


class TestPoolValidation:
    def test_ratio_20_80_accepted(self):
        assert validate_pool_weights([20, 80]) == (20, 80)

    @pytest.mark.parametrize(
        "weights", [[2, 98], [50, 60], [100], [20, 40, 40], None, "2080", [20.0, 80]]
    )
    def test_bad_ratios_rejected(self, weights):
        with pytest.raises(ValidationError):
            validate_pool_weights(weights)

    @pytest.mark.parametrize("tier", [1, 5, 30, 100])
    def test_supported_fee_tiers(self, tier):
        assert validate_fee_tier(tier) == tier

    @pytest.mark.parametrize("tier", [0, 25, 3000, True])
    def test_unsupported_fee_tiers(self, tier):
        with pytest.raises(ValidationError):
            validate_fee_tier(tier)


class TestCreatePool:
    def _create(self, **overrides):
        kwargs = {
            "account": ACCOUNT_A,
            "network": STOKENET,
            "resource_address_1": RESOURCE_1,
            "resource_address_2": RESOURCE_2,
            "amount_1": "100",
            "amount_2": "200",
        }
        kwargs.update(overrides)
        return create_pool_manifest(**kwargs)

    def test_standard_pool_from_package(self):
        text = self._create().render()
        assert (
            "CALL_FUNCTION\n"
            f'    Address("{EXCHANGE_PACKAGE}")\n'
            '    "BasicPool"\n'
            '    "instantiate_with_liquidity"\n'
            '    Bucket("bucket1")\n'
            '    Bucket("bucket2")\n'
            '    Decimal("0.003")\n'
            ";"
        ) in text
        assert 'Decimal("50")' in text

    def test_imbalanced_pool_passes_weights(self):
        text = self._create(variant="imbalanced", weights=[20, 80]).render()
        assert '"FlexPool"' in text
        assert "    20u8\n    80u8\n" in text

    def test_imbalanced_pool_rejects_bad_ratio(self):
        with pytest.raises(ValidationError):
            self._create(variant="imbalanced", weights=[2, 98])

    def test_hooked_pool_requires_hook(self):
        with pytest.raises(ValidationError):
            self._create(variant="hooked")
        text = self._create(variant="hooked", hook_address=HOOK).render()
        assert '"PrecisionPool"' in text
        assert f'Address("{HOOK}")' in text

    def test_same_resource_twice_rejected(self):
        with pytest.raises(ValidationError):
            self._create(resource_address_2=RESOURCE_1)

    def test_unknown_variant_rejected(self):
        with pytest.raises(ValidationError):
            self._create(variant="concentrated")

    def test_bad_fee_tier_rejected(self):
        with pytest.raises(ValidationError):
            self._create(fee_tier=25)

    def test_localnet_has_no_exchange(self):
        with pytest.raises(NetworkUnsupportedError):
            self._create(network=NETWORKS["localnet"])

    def test_unconfigured_factory_is_unsupported(self):
        with pytest.raises(NetworkUnsupportedError):
            self._create(network=NETWORKS["mainnet"])

    def test_factory_mode_calls_factory_component(self):
        network = dataclasses.replace(
            STOKENET,
            exchange=ExchangeConfig(
                mode="factory", factory_addresses={"standard": COMPONENT}
            ),
        )
        manifest = self._create(network=network)
        assert (COMPONENT, "instantiate_with_liquidity") in manifest.method_calls()
        assert "CALL_FUNCTION" not in manifest.instruction_names()


class TestLiquidityAndSwaps:
    def test_add_liquidity(self):
        manifest = add_liquidity_manifest(
            account=ACCOUNT_A,
            pool_address=POOL,
            resource_address_1=RESOURCE_1,
            resource_address_2=RESOURCE_2,
            amount_1="1",
            amount_2="2",
        )
        assert (POOL, "add_liquidity") in manifest.method_calls()
        assert 'Bucket("bucket2")' in manifest.render()

    def test_remove_liquidity_with_minimums(self):
        manifest = remove_liquidity_manifest(
            account=ACCOUNT_A,
            pool_address=POOL,
            lp_resource_address=LP_TOKEN,
            amount="10",
            min_amounts={RESOURCE_1: "1", RESOURCE_2: "0"},
        )
        names = manifest.instruction_names()
        assert names.count("ASSERT_WORKTOP_CONTAINS") == 1
        assert (POOL, "remove_liquidity") in manifest.method_calls()

    def test_swap_with_minimum_out(self):
        manifest = swap_manifest(
            account=ACCOUNT_A,
            pool_address=POOL,
            from_resource_address=RESOURCE_1,
            to_resource_address=RESOURCE_2,
            amount_in="10",
            min_amount_out="9.5",
        )
        text = manifest.render()
        assert (POOL, "swap") in manifest.method_calls()
        assert (
            "ASSERT_WORKTOP_CONTAINS\n"
            f'    Address("{RESOURCE_2}")\n'
            '    Decimal("9.5")\n'
            ";"
        ) in text

    def test_swap_without_minimum_has_no_assertion(self):
        manifest = swap_manifest(
            account=ACCOUNT_A,
            pool_address=POOL,
            from_resource_address=RESOURCE_1,
            to_resource_address=RESOURCE_2,
            amount_in="10",
        )
        assert "ASSERT_WORKTOP_CONTAINS" not in manifest.instruction_names()

    def test_swap_same_resource_rejected(self):
        with pytest.raises(ValidationError):
            swap_manifest(
                account=ACCOUNT_A,
                pool_address=POOL,
                from_resource_address=RESOURCE_1,
                to_resource_address=RESOURCE_1,
                amount_in="10",
            )

    def test_flash_loan(self):
        manifest = flash_loan_manifest(
            account=ACCOUNT_A,
            pool_address=POOL,
            resource_address=RESOURCE_1,
            amount="1000",
            callback_component_address=COMPONENT,
            callback_data="arb",
        )
        assert (
            "CALL_METHOD\n"
            f'    Address("{POOL}")\n'
            '    "flash_loan"\n'
            f'    Address("{RESOURCE_1}")\n'
            '    Decimal("1000")\n'
            f'    Address("{COMPONENT}")\n'
            '    "arb"\n'
            ";"
        ) in manifest.render()


class TestComponentCalls:
    def test_call_method_formats_args(self):
        manifest = call_method_manifest(
            account=ACCOUNT_A,
            component_address=COMPONENT,
            method_name="set_price",
            args=["fast", 5, Decimal("1.25"), RESOURCE_1],
        )
        assert (
            "CALL_METHOD\n"
            f'    Address("{COMPONENT}")\n'
            '    "set_price"\n'
            '    "fast"\n'
            "    5u32\n"
            '    Decimal("1.25")\n'
            f'    Address("{RESOURCE_1}")\n'
            ";"
        ) in manifest.render()

    def test_call_method_without_args(self):
        manifest = call_method_manifest(
            account=ACCOUNT_A, component_address=COMPONENT, method_name="ping"
        )
        assert (COMPONENT, "ping") in manifest.method_calls()

    def test_call_method_requires_name(self):
        with pytest.raises(ValidationError):
            call_method_manifest(
                account=ACCOUNT_A, component_address=COMPONENT, method_name=" "
            )


def test_faucet_pays_its_own_fee():
    faucet = STOKENET.faucet_address
    manifest = faucet_manifest(account=ACCOUNT_A, faucet_address=faucet)
    assert manifest.method_calls() == [
        (faucet, "lock_fee"),
        (faucet, "free"),
        (ACCOUNT_A, "try_deposit_batch_or_abort"),
    ]
