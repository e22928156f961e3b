# MIT License
#
# Copyright (c) 2018 Evgeny Medvedev, evge.medvedev@gmail.com
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
#
# Modified By: Cuong CT, 6/12/2025
# Change Description:
# - Decodes ERC20 Transfer/Approval logs of traced calls into state changes.
# - Mint/Burn detection using ZERO_ADDRESS.

from typing import Any, Dict, Iterable, List, Optional

from constants.event_signatures import APPROVAL_EVENT_SIGNATURE, TRANSFER_EVENT_SIGNATURE, ZERO_ADDRESS
from simulation.codec.abi_codec import unscale_amount
from simulation.models.contract import ContractDescriptor
from simulation.models.state_change import ApprovalChange, BurnChange, MintChange, StateChange, TransferChange
from utils.formatter_utils import address_from_topic, hex_to_dec, split_words
from utils.logger_utils import get_logger

logger = get_logger("State Change Service")


class StateChangeService(object):
    @staticmethod
    def collect_logs(frame: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Logs of a callTracer frame and all its sub-calls, in execution order."""
        if not frame:
            return []
        logs = list(frame.get("logs") or [])
        for sub_call in frame.get("calls") or []:
            logs.extend(StateChangeService.collect_logs(sub_call))
        return logs

    @staticmethod
    def extract_state_changes(logs: Iterable[Dict[str, Any]], contract: ContractDescriptor) -> List[StateChange]:
        """
        Decodes Transfer and Approval logs emitted by `contract`.
        Logs of other contracts or with unknown topics are ignored; nothing is
        produced when there are no logs.
        """
        changes: List[StateChange] = []

        for log_index, log in enumerate(logs):
            address = (log.get("address") or "").lower()
            topics: List[str] = log.get("topics") or []
            if address != contract.address.lower() or not topics:
                continue

            event = contract.event_by_topic(topics[0])
            if event is None:
                continue
            sig = event.topic.lower()

            try:
                if sig == TRANSFER_EVENT_SIGNATURE:
                    change = StateChangeService._handle_transfer(topics, log.get("data"), contract, log_index)
                elif sig == APPROVAL_EVENT_SIGNATURE:
                    change = StateChangeService._handle_approval(topics, log.get("data"), contract, log_index)
                else:
                    change = None
            except (ValueError, TypeError, IndexError) as e:
                logger.warning(f"Failed to decode log {log_index} of {contract.symbol}: {e}. Raw Log: {log}")
                continue

            if change is not None:
                changes.append(change)
        return changes

    @staticmethod
    def _amount_fields(data: Optional[str], contract: ContractDescriptor, log_index: int) -> Dict[str, Any]:
        words = split_words(data)
        if len(words) != 1:
            raise ValueError(f"expected one data word, got {len(words)}")
        raw_amount = hex_to_dec(words[0])
        if raw_amount is None:
            raise ValueError(f"invalid amount word {words[0]}")
        return {
            "contract_address": contract.address,
            "raw_amount": raw_amount,
            "amount": unscale_amount(raw_amount, contract.decimals),
            "log_index": log_index,
        }

    @staticmethod
    def _handle_transfer(
        topics: List[str], data: Optional[str], contract: ContractDescriptor, log_index: int
    ) -> Optional[StateChange]:
        # ERC20 Transfer(from, to, value); ERC721 carries the token id as a 4th topic
        if len(topics) != 3:
            return None

        _from = address_from_topic(topics[1])
        _to = address_from_topic(topics[2])
        fields = StateChangeService._amount_fields(data, contract, log_index)

        if _from == ZERO_ADDRESS:
            return MintChange(to_address=_to, **fields)
        elif _to == ZERO_ADDRESS:
            return BurnChange(from_address=_from, **fields)
        return TransferChange(from_address=_from, to_address=_to, **fields)

    @staticmethod
    def _handle_approval(
        topics: List[str], data: Optional[str], contract: ContractDescriptor, log_index: int
    ) -> Optional[StateChange]:
        if len(topics) != 3:
            return None

        fields = StateChangeService._amount_fields(data, contract, log_index)
        return ApprovalChange(owner=address_from_topic(topics[1]), spender=address_from_topic(topics[2]), **fields)
