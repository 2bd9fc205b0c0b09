from datetime import datetime, timezone

from botocore.exceptions import ClientError


def client_error(code, operation, message="error"):
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class FakeBody:
    def __init__(self, data, fail_after=None):
        self.data = data
        self.fail_after = fail_after
        self.closed = False

    def iter_chunks(self, chunk_size=1024):
        for sent, start in enumerate(range(0, len(self.data), chunk_size)):
            if self.fail_after is not None and sent >= self.fail_after:
                raise ConnectionResetError("connection reset by peer")
            yield self.data[start:start + chunk_size]

    def close(self):
        self.closed = True


class FakeS3Client:
    """In-memory stand-in for the boto3 S3 client."""

    def __init__(self, buckets=None, errors=None):
        self.buckets = {name: dict(objects) for name, objects in (buckets or {}).items()}
        self.errors = errors or {}
        self.calls = []
        self.bodies = []
        self.upload_file_configs = []
        self.body_fail_after = None

    def put(self, bucket, key, data, content_type="application/octet-stream"):
        self.buckets.setdefault(bucket, {})[key] = (data, content_type)

    def _record(self, operation, **kwargs):
        self.calls.append((operation, kwargs))
        error = self.errors.get(operation)
        if isinstance(error, Exception):
            raise error

    def _bucket(self, name, operation):
        if name not in self.buckets:
            raise client_error("NoSuchBucket", operation, "The specified bucket does not exist")
        return self.buckets[name]

    def operations(self):
        return [operation for operation, _ in self.calls]

    def list_buckets(self):
        self._record("list_buckets")
        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        return {"Buckets": [{"Name": name, "CreationDate": created} for name in self.buckets]}

    def list_objects_v2(self, **kwargs):
        self._record("list_objects_v2", **kwargs)
        objects = self._bucket(kwargs["Bucket"], "ListObjectsV2")
        prefix = kwargs.get("Prefix", "")
        delimiter = kwargs.get("Delimiter")
        max_keys = kwargs.get("MaxKeys", 1000)
        start = int(kwargs.get("ContinuationToken") or 0)

        entries = []
        seen = set()
        for key in sorted(objects):
            if not key.startswith(prefix):
                continue
            relative = key[len(prefix):]
            if delimiter and delimiter in relative:
                common = prefix + relative.split(delimiter, 1)[0] + delimiter
                if common not in seen:
                    seen.add(common)
                    entries.append(("prefix", common))
            else:
                entries.append(("key", key))

        page = entries[start:start + max_keys]
        truncated = start + max_keys < len(entries)
        modified = datetime(2024, 2, 1, tzinfo=timezone.utc)
        response = {
            "Contents": [
                {
                    "Key": value,
                    "Size": len(objects[value][0]),
                    "LastModified": modified,
                    "ETag": '"etag"',
                    "StorageClass": "STANDARD",
                }
                for kind, value in page
                if kind == "key"
            ],
            "CommonPrefixes": [{"Prefix": value} for kind, value in page if kind == "prefix"],
            "IsTruncated": truncated,
            "KeyCount": len(page),
        }
        if truncated:
            response["NextContinuationToken"] = str(start + max_keys)
        return response

    def get_object(self, **kwargs):
        self._record("get_object", **kwargs)
        objects = self._bucket(kwargs["Bucket"], "GetObject")
        if kwargs["Key"] not in objects:
            raise client_error("NoSuchKey", "GetObject", "The specified key does not exist.")
        data, content_type = objects[kwargs["Key"]]
        body = FakeBody(data, fail_after=self.body_fail_after)
        self.bodies.append(body)
        return {"Body": body, "ContentType": content_type, "ContentLength": len(data)}

    def upload_file(self, filename, bucket, key, ExtraArgs=None, Callback=None, Config=None):
        self._record("upload_file", filename=filename, bucket=bucket, key=key, extra_args=ExtraArgs)
        self.upload_file_configs.append(Config)
        objects = self._bucket(bucket, "PutObject")
        with open(filename, "rb") as handle:
            data = handle.read()
        content_type = (ExtraArgs or {}).get("ContentType", "binary/octet-stream")
        objects[key] = (data, content_type)

    def delete_object(self, **kwargs):
        self._record("delete_object", **kwargs)
        self._bucket(kwargs["Bucket"], "DeleteObject").pop(kwargs["Key"], None)

    def delete_objects(self, **kwargs):
        self._record("delete_objects", **kwargs)
        objects = self._bucket(kwargs["Bucket"], "DeleteObjects")
        deleted = []
        errors = []
        for item in kwargs["Delete"]["Objects"]:
            key = item["Key"]
            if key.startswith("locked/"):
                errors.append({"Key": key, "Code": "AccessDenied", "Message": "Access Denied"})
                continue
            objects.pop(key, None)
            deleted.append({"Key": key})
        return {"Deleted": deleted, "Errors": errors}

    def generate_presigned_url(self, client_method, Params=None, ExpiresIn=3600):
        self._record("generate_presigned_url", method=client_method, params=Params, expires_in=ExpiresIn)
        return f"https://store.example/{Params['Bucket']}/{Params['Key']}?expires={ExpiresIn}"
