from podsync.changelog import ChangeLog, begin_tracking
from podsync.dataset import SolidDataset, create_dataset
from podsync.diagnostics import change_log_as_markdown, dataset_as_markdown, thing_as_markdown
from podsync.errors import ContainerExistsError, FetchError, MissingLocationError, NotAContainerError, PodSyncError
from podsync.fetcher import client_fetch, create_client
from podsync.local_nodes import LocalNode, resolve_local_nodes
from podsync.resource import (
    get_content_type,
    get_pod_owner,
    get_resource_info,
    get_source_url,
    is_container,
    is_pod_owner,
    is_raw_data,
)
from podsync.resource_info import AccessModes, LinkRelation, Permissions, ResourceInfo
from podsync.settings import VERSION as __version__
from podsync.sync import (
    create_container_at,
    create_container_in_container,
    delete_container,
    delete_dataset,
    get_contained_resource_urls,
    get_dataset,
    save_dataset_at,
    save_dataset_in_container,
)
