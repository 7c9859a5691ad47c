"""Endpoint facade -- one method per Burst SMS API operation.

:class:`BurstSMS` (blocking) and :class:`AsyncBurstSMS` (non-blocking) share
the operation table defined on :class:`BurstSMSOperations`. Each operation
checks its call-specific preconditions, then hands the endpoint path and the
ordered parameter list to a request engine. Precondition failures raise
:class:`~burstsms.exceptions.InvalidUsageError` before anything is sent.

On :class:`AsyncBurstSMS` every operation returns an awaitable; the
precondition checks still run eagerly when the method is called.

Parameter names follow the provider's query parameter names, except
``from_`` (``from`` is a keyword) and ``country_code`` (``countrycode``).
Every operation returns the decoded JSON body.

See Also:
    `API documentation <http://support.burstsms.com/hc/en-us/categories/200154016-API-Documentation>`_
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any, Optional, Union

import httpx

from burstsms.client.engine import AsyncRequestEngine, RequestEngine
from burstsms.client.params import Param, custom_field_params, list_field_params
from burstsms.exceptions import InvalidUsageError
from burstsms.models import (
    ClientConfig,
    CountryCode,
    DeliveryStatus,
    MemberSelection,
    NumberFilter,
    OnlyOmitBoth,
    OnlyOmitInclude,
)

MAX_RECIPIENTS = 10_000
"""Most numbers a single ``send-sms`` call accepts in ``to``."""

MAX_MESSAGE_LENGTH = 612
"""Longest message text, in characters (four concatenated SMS parts)."""

MAX_LIST_FIELDS = 10
"""Most custom fields a list can define."""

Timestamp = Union[str, datetime]
CustomFields = Mapping[Union[str, int], Optional[str]]


class BurstSMSOperations(ABC):
    """The operation table shared by the blocking and non-blocking clients.

    Subclasses implement :meth:`_send`, which receives the endpoint path and
    the ordered parameters and returns the decoded body (or an awaitable of
    it).
    """

    @abstractmethod
    def _send(self, path: str, params: list[Param]) -> Any:
        ...

    # ------------------------------------------------------------------ #
    # SMS
    # ------------------------------------------------------------------ #

    def send_sms(
        self,
        message: str,
        to: Optional[Sequence[str]] = None,
        from_: Optional[str] = None,
        send_at: Optional[Timestamp] = None,
        list_id: Optional[int] = None,
        dlr_callback: Optional[str] = None,
        reply_callback: Optional[str] = None,
        validity: Optional[int] = None,
        replies_to_email: Optional[str] = None,
        from_shared: Optional[bool] = None,
        country_code: Optional[CountryCode] = None,
    ) -> Any:
        """Send an SMS to a set of numbers or to every member of a list.

        Args:
            message: Message text, at most :data:`MAX_MESSAGE_LENGTH` characters.
            to: Up to :data:`MAX_RECIPIENTS` numbers in international format.
                Required unless *list_id* is given.
            from_: Alphanumeric caller ID. Messages sent from an alphanumeric
                ID cannot be replied to.
            send_at: When to send; a ``datetime`` is sent in UTC.
            list_id: Send to this recipient list instead of (or as well as) *to*.
            dlr_callback: URL notified of delivery receipts.
            reply_callback: URL notified of replies.
            validity: Minutes to keep attempting delivery; 0 means no limit.
            replies_to_email: Forward replies to this authorised address.
            from_shared: Force sending from the shared number pool.
            country_code: Convert local numbers in *to* to international format.

        Raises:
            InvalidUsageError: If the message is empty or too long, no
                destination is given, or *to* holds too many numbers.
        """
        if not message:
            raise InvalidUsageError("message must not be empty")
        if len(message) > MAX_MESSAGE_LENGTH:
            raise InvalidUsageError(
                f"message is {len(message)} characters; the limit is {MAX_MESSAGE_LENGTH}"
            )
        if not to and list_id is None:
            raise InvalidUsageError("send_sms requires either 'to' or 'list_id'")
        if to is not None and len(to) > MAX_RECIPIENTS:
            raise InvalidUsageError(
                f"'to' holds {len(to)} numbers; the limit is {MAX_RECIPIENTS}"
            )
        return self._send("send-sms.json", [
            ("message", message),
            ("to", to),
            ("from", from_),
            ("send_at", send_at),
            ("list_id", list_id),
            ("dlr_callback", dlr_callback),
            ("reply_callback", reply_callback),
            ("validity", validity),
            ("replies_to_email", replies_to_email),
            ("from_shared", from_shared),
            ("countrycode", country_code),
        ])

    def format_number(self, number: str, country_code: CountryCode) -> Any:
        """Format and validate *number* against a country's numbering plan."""
        return self._send("format-number.json", [
            ("msisdn", number),
            ("countrycode", country_code),
        ])

    def get_sms(self, message_id: int) -> Any:
        """Get information about a message you have sent."""
        return self._send("get-sms.json", [("message_id", message_id)])

    def get_sms_stats(self, message_id: int) -> Any:
        """Get the delivery statistics of a message you have sent."""
        return self._send("get-sms-stats.json", [("message_id", message_id)])

    def get_sms_responses(
        self,
        message_id: Optional[int] = None,
        keyword_id: Optional[int] = None,
        keyword: Optional[str] = None,
        number: Optional[str] = None,
        msisdn: Optional[str] = None,
        page: Optional[int] = None,
        max: Optional[int] = None,
        include_original: Optional[bool] = None,
    ) -> Any:
        """Pick up replies to a message or to a keyword.

        Raises:
            InvalidUsageError: If neither *message_id* nor *keyword_id* is
                given, or *keyword* is given without *number*.
        """
        if message_id is None and keyword_id is None:
            raise InvalidUsageError(
                "get_sms_responses requires either 'message_id' or 'keyword_id'"
            )
        if keyword is not None and number is None:
            raise InvalidUsageError("'number' is required when 'keyword' is set")
        return self._send("get-sms-responses.json", [
            ("message_id", message_id),
            ("keyword_id", keyword_id),
            ("keyword", keyword),
            ("number", number),
            ("msisdn", msisdn),
            ("page", page),
            ("max", max),
            ("include_original", include_original),
        ])

    def get_user_sms_responses(
        self,
        start: Optional[Timestamp] = None,
        end: Optional[Timestamp] = None,
        page: Optional[int] = None,
        max: Optional[int] = None,
        keywords: Optional[OnlyOmitBoth] = None,
        include_original: Optional[bool] = None,
    ) -> Any:
        """List every reply received by the account within a time window."""
        return self._send("get-user-sms-responses.json", [
            ("start", start),
            ("end", end),
            ("page", page),
            ("max", max),
            ("keywords", keywords),
            ("include_original", include_original),
        ])

    def get_sms_sent(
        self,
        message_id: int,
        optouts: Optional[OnlyOmitInclude] = None,
        page: Optional[int] = None,
        max: Optional[int] = None,
        delivery: Optional[DeliveryStatus] = None,
    ) -> Any:
        """Get the recipients of a message and their delivery status."""
        return self._send("get-sms-sent.json", [
            ("message_id", message_id),
            ("optouts", optouts),
            ("page", page),
            ("max", max),
            ("delivery", delivery),
        ])

    def cancel_sms(self, message_id: int) -> Any:
        """Cancel a scheduled message that has not been sent yet."""
        return self._send("cancel-sms.json", [("message_id", message_id)])

    # ------------------------------------------------------------------ #
    # Numbers
    # ------------------------------------------------------------------ #

    def get_number(self, number: str) -> Any:
        """Get details of a leased virtual number."""
        return self._send("get-number.json", [("number", number)])

    def get_numbers(
        self,
        filter: Optional[NumberFilter] = None,
        page: Optional[int] = None,
        max: Optional[int] = None,
    ) -> Any:
        """List leased numbers, or numbers available for lease."""
        return self._send("get-numbers.json", [
            ("filter", filter),
            ("page", page),
            ("max", max),
        ])

    def lease_number(self, number: Optional[str] = None) -> Any:
        """Lease a virtual number; without *number* the provider picks one."""
        return self._send("lease-number.json", [("number", number)])

    # ------------------------------------------------------------------ #
    # Keywords
    # ------------------------------------------------------------------ #

    def add_keyword(
        self,
        keyword: str,
        number: str,
        reference: Optional[str] = None,
        list_id: Optional[int] = None,
        welcome_message: Optional[str] = None,
        members_message: Optional[str] = None,
        activate: Optional[bool] = None,
        forward_url: Optional[str] = None,
        forward_email: Optional[Sequence[str]] = None,
        forward_sms: Optional[Sequence[str]] = None,
    ) -> Any:
        """Add a keyword to a virtual number."""
        return self._send("add-keyword.json", _keyword_params(
            keyword, number, reference, list_id, welcome_message,
            members_message, activate, forward_url, forward_email, forward_sms,
        ))

    def edit_keyword(
        self,
        keyword: str,
        number: str,
        reference: Optional[str] = None,
        list_id: Optional[int] = None,
        welcome_message: Optional[str] = None,
        members_message: Optional[str] = None,
        activate: Optional[bool] = None,
        forward_url: Optional[str] = None,
        forward_email: Optional[Sequence[str]] = None,
        forward_sms: Optional[Sequence[str]] = None,
    ) -> Any:
        """Edit an existing keyword."""
        return self._send("edit-keyword.json", _keyword_params(
            keyword, number, reference, list_id, welcome_message,
            members_message, activate, forward_url, forward_email, forward_sms,
        ))

    def get_keywords(
        self,
        number: Optional[str] = None,
        page: Optional[int] = None,
        max: Optional[int] = None,
    ) -> Any:
        return self._send("get-keywords.json", [
            ("number", number),
            ("page", page),
            ("max", max),
        ])

    # ------------------------------------------------------------------ #
    # Lists
    # ------------------------------------------------------------------ #

    def remove_list(self, list_id: int) -> Any:
        """Delete a list and all of its members."""
        return self._send("remove-list.json", [("list_id", list_id)])

    def get_list(
        self,
        list_id: int,
        members: Optional[MemberSelection] = None,
        page: Optional[int] = None,
        max: Optional[int] = None,
    ) -> Any:
        """Get a list's metadata and, optionally, its members."""
        return self._send("get-list.json", [
            ("list_id", list_id),
            ("members", members),
            ("page", page),
            ("max", max),
        ])

    def get_lists(self, page: Optional[int] = None, max: Optional[int] = None) -> Any:
        return self._send("get-lists.json", [("page", page), ("max", max)])

    def add_list(self, name: str, field_names: Optional[Sequence[str]] = None) -> Any:
        """Create a list, optionally naming its custom fields.

        The names are sent as ``field_1`` .. ``field_N`` in the given order.

        Raises:
            InvalidUsageError: If more than :data:`MAX_LIST_FIELDS` field
                names are given.
        """
        if field_names is not None and len(field_names) > MAX_LIST_FIELDS:
            raise InvalidUsageError(
                f"a list has at most {MAX_LIST_FIELDS} custom fields, got {len(field_names)}"
            )
        return self._send("add-list.json", [("name", name), *list_field_params(field_names)])

    def add_to_list(
        self,
        list_id: int,
        msisdn: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        fields: Optional[CustomFields] = None,
        country_code: Optional[CountryCode] = None,
    ) -> Any:
        """Add a member to a list.

        Args:
            fields: Custom field values keyed by field number (``1`` .. ``10``)
                or by field name.
        """
        return self._send("add-to-list.json", [
            ("list_id", list_id),
            ("msisdn", msisdn),
            ("first_name", first_name),
            ("last_name", last_name),
            ("countrycode", country_code),
            *custom_field_params(fields),
        ])

    def add_field_to_list(self, list_id: int, fields: Optional[CustomFields] = None) -> Any:
        """Add or rename custom fields on an existing list."""
        return self._send("add-field-to-list.json", [
            ("list_id", list_id),
            *custom_field_params(fields),
        ])

    def delete_from_list(self, list_id: int, msisdn: str) -> Any:
        """Remove a member from a list; ``list_id=0`` removes it from every list."""
        return self._send("delete-from-list.json", [
            ("list_id", list_id),
            ("msisdn", msisdn),
        ])

    def optout_list_member(self, list_id: int, msisdn: str) -> Any:
        """Opt a member out of a list; ``list_id=0`` opts it out of every list."""
        return self._send("optout-list-member.json", [
            ("list_id", list_id),
            ("msisdn", msisdn),
        ])

    def edit_list_member(
        self,
        list_id: int,
        msisdn: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        fields: Optional[CustomFields] = None,
    ) -> Any:
        return self._send("edit-list-member.json", [
            ("list_id", list_id),
            ("msisdn", msisdn),
            ("first_name", first_name),
            ("last_name", last_name),
            *custom_field_params(fields),
        ])

    # ------------------------------------------------------------------ #
    # Email to SMS
    # ------------------------------------------------------------------ #

    def add_email(
        self,
        email: str,
        max_sms: Optional[int] = None,
        number: Optional[str] = None,
    ) -> Any:
        """Authorise an address to send SMS by email."""
        return self._send("add-email.json", [
            ("email", email),
            ("max-sms", max_sms),
            ("number", number),
        ])

    def delete_email(self, email: str) -> Any:
        return self._send("delete-email.json", [("email", email)])

    # ------------------------------------------------------------------ #
    # Resellers
    # ------------------------------------------------------------------ #

    def get_client(self, client_id: int) -> Any:
        return self._send("get-client.json", [("client_id", client_id)])

    def get_clients(self, page: Optional[int] = None, max: Optional[int] = None) -> Any:
        return self._send("get-clients.json", [("page", page), ("max", max)])

    def add_client(
        self,
        name: str,
        contact: str,
        email: str,
        password: str,
        msisdn: str,
        timezone: Optional[str] = None,
        client_pays: Optional[bool] = None,
        sms_margin: Optional[float] = None,
        number_margin: Optional[float] = None,
    ) -> Any:
        """Create a client account under this reseller account."""
        return self._send("add-client.json", [
            ("name", name),
            ("contact", contact),
            ("email", email),
            ("password", password),
            ("msisdn", msisdn),
            ("timezone", timezone),
            ("client_pays", client_pays),
            ("sms_margin", sms_margin),
            ("number_margin", number_margin),
        ])

    def edit_client(
        self,
        client_id: int,
        name: Optional[str] = None,
        contact: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
        msisdn: Optional[str] = None,
        timezone: Optional[str] = None,
        client_pays: Optional[bool] = None,
        sms_margin: Optional[float] = None,
    ) -> Any:
        return self._send("edit-client.json", [
            ("client_id", client_id),
            ("name", name),
            ("contact", contact),
            ("email", email),
            ("password", password),
            ("msisdn", msisdn),
            ("timezone", timezone),
            ("client_pays", client_pays),
            ("sms_margin", sms_margin),
        ])

    def get_transactions(
        self,
        client_id: int,
        start: Optional[Timestamp] = None,
        end: Optional[Timestamp] = None,
        page: Optional[int] = None,
        max: Optional[int] = None,
    ) -> Any:
        """List the billing transactions of a client."""
        return self._send("get-transactions.json", [
            ("client_id", client_id),
            ("start", start),
            ("end", end),
            ("page", page),
            ("max", max),
        ])

    def get_transaction(self, transaction_id: int) -> Any:
        return self._send("get-transaction.json", [("transaction_id", transaction_id)])

    # ------------------------------------------------------------------ #
    # Account
    # ------------------------------------------------------------------ #

    def get_balance(self) -> Any:
        """Get the account balance and currency."""
        return self._send("get-balance.json", [])


def _keyword_params(
    keyword: str,
    number: str,
    reference: Optional[str],
    list_id: Optional[int],
    welcome_message: Optional[str],
    members_message: Optional[str],
    activate: Optional[bool],
    forward_url: Optional[str],
    forward_email: Optional[Sequence[str]],
    forward_sms: Optional[Sequence[str]],
) -> list[Param]:
    return [
        ("keyword", keyword),
        ("number", number),
        ("reference", reference),
        ("list_id", list_id),
        ("welcome_message", welcome_message),
        ("members_message", members_message),
        ("activate", activate),
        ("forward_url", forward_url),
        ("forward_email", forward_email),
        ("forward_sms", forward_sms),
    ]


class BurstSMS(BurstSMSOperations):
    """Blocking Burst SMS client.

    Args:
        config: Connection settings and credentials.
        client: Optional :class:`httpx.Client` to send requests with; it is
            not closed by :meth:`close`.
        transport: Optional transport for the internally created client.

    Example::

        with BurstSMS(ClientConfig(username="key", password="secret")) as sms:
            sms.get_balance()
    """

    def __init__(
        self,
        config: ClientConfig,
        client: Optional[httpx.Client] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._engine = RequestEngine(config, client=client, transport=transport)

    @property
    def engine(self) -> RequestEngine:
        return self._engine

    def __enter__(self) -> BurstSMS:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        self._engine.close()

    def call(self, path: str, params: Sequence[Param] = ()) -> Any:
        """Invoke any endpoint directly, bypassing the per-operation checks."""
        return self._engine.call(path, params)

    def _send(self, path: str, params: list[Param]) -> Any:
        return self._engine.call(path, params)


class AsyncBurstSMS(BurstSMSOperations):
    """Non-blocking Burst SMS client; every operation returns an awaitable.

    Example::

        async with AsyncBurstSMS(config) as sms:
            balance = await sms.get_balance()
    """

    def __init__(
        self,
        config: ClientConfig,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._engine = AsyncRequestEngine(config, client=client, transport=transport)

    @property
    def engine(self) -> AsyncRequestEngine:
        return self._engine

    async def __aenter__(self) -> AsyncBurstSMS:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._engine.aclose()

    async def call(self, path: str, params: Sequence[Param] = ()) -> Any:
        """Invoke any endpoint directly, bypassing the per-operation checks."""
        return await self._engine.call(path, params)

    def _send(self, path: str, params: list[Param]) -> Any:
        return self._engine.call(path, params)
