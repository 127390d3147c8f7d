import argparse
import json
import sys

from netsuite_errors import NetSuiteError
from netsuite_client import NetSuiteClient


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def main(argv=None) -> int:
    """
    Entry point for the app.
    This is where we *use* NetSuiteClient.
    """
    parser = argparse.ArgumentParser(description="NetSuite REST client")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("signin", help="Sign in and list a few record types")

    p_get = sub.add_parser("get", help="GET a REST path, e.g. /record/v1/invoice")
    p_get.add_argument("path")

    p_query = sub.add_parser("query", help="Run a SuiteQL query")
    p_query.add_argument("sql")
    p_query.add_argument("--limit", type=int, default=None)
    p_query.add_argument("--offset", type=int, default=None)

    p_download = sub.add_parser("download", help="Download a File Cabinet file through the RESTlet")
    p_download.add_argument("file_id")
    p_download.add_argument("folder", nargs="?", default=".")

    p_upload = sub.add_parser("upload", help="Upload a local file through the RESTlet")
    p_upload.add_argument("directory")
    p_upload.add_argument("folder_name")
    p_upload.add_argument("file")

    args = parser.parse_args(argv)

    try:
        with NetSuiteClient() as client:
            client.sign_in()

            if args.command == "signin":
                data = client.get_metadata_catalog() or {}
                items = data.get("items", [])
                print(f"✅ Connected successfully! Found {len(items)} record types.")
                for item in items[:5]:
                    print(" -", item.get("name"))
            elif args.command == "get":
                _print_json(client.request_get(args.path))
            elif args.command == "query":
                _print_json(client.execute_suiteql(args.sql, limit=args.limit, offset=args.offset))
            elif args.command == "download":
                path = client.download_file(args.file_id, args.folder)
                print(f"✅ Saved {path}")
            elif args.command == "upload":
                result = client.upload_file(args.directory, args.folder_name, args.file)
                if result is None:
                    print("⚠️  Nothing uploaded (file not found or empty answer)")
                else:
                    _print_json(result)
    except NetSuiteError as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
