GUESTS_URL = "/api/v1/guests"
MY_GUEST_URL = "/api/v1/guests/me"
GUEST_STATS_URL = "/api/v1/guests/stats"
EXPORT_GUESTS_URL = "/api/v1/guests/export.csv"
BULK_ARCHIVE_URL = "/api/v1/guests/bulk-archive"
SYNC_ACCOUNTS_URL = "/api/v1/guests/sync-accounts"
GUEST_URL = "/api/v1/guests/{guest_id}"
PROCESS_RSVP_URL = "/api/v1/guests/{guest_id}/rsvp"
LINK_GUEST_URL = "/api/v1/guests/{guest_id}/link"
UNLINK_GUEST_URL = "/api/v1/guests/{guest_id}/unlink"
ARCHIVE_GUEST_URL = "/api/v1/guests/{guest_id}/archive"
RESTORE_GUEST_URL = "/api/v1/guests/{guest_id}/restore"
