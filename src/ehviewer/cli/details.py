"""``--get-details`` — print hub and partition metadata, then exit."""

from __future__ import annotations

from ehviewer.cli.console import out
from ehviewer.core.models import HubProperties, PartitionProperties
from ehviewer.core.protocols import EventHubProvider


def render_hub_header(namespace: str, hub: HubProperties) -> list[str]:
    return [
        f"Event Hub Namespace: {namespace}",
        f"Event Hub Name: {hub.name}",
        f"Created On: {hub.created_at if hub.created_at is not None else 'Unknown'}",
        f"Total Partitions: {len(hub.partition_ids)}",
        "",
    ]


def render_partition(props: PartitionProperties) -> list[str]:
    return [
        f"Partition: {props.partition_id}",
        f"\tHas Messages: {'No' if props.is_empty else 'Yes'}",
        f"\tFirst Sequence Number: {props.beginning_sequence_number}",
        f"\tLast Sequence Number: {props.last_enqueued_sequence_number}",
        f"\tLast Offset Number: {props.last_enqueued_offset}",
        f"\tLast Enqueued Time: {props.last_enqueued_time}",
        "",
    ]


def print_lines(lines: list[str]) -> None:
    out.print("\n".join(lines), markup=False, highlight=False, emoji=False, soft_wrap=True)


async def show_details(provider: EventHubProvider) -> None:
    """Print the hub header and one block per partition.

    The provider is closed before returning.
    """
    try:
        hub = await provider.get_hub_properties()
        print_lines(render_hub_header(provider.fully_qualified_namespace, hub))
        for partition_id in hub.partition_ids:
            props = await provider.get_partition_properties(partition_id)
            print_lines(render_partition(props))
    finally:
        await provider.close()
