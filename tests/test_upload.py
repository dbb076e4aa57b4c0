from conftest import create_assignment

PDF = ("answer.pdf", b"%PDF-1.4 fake", "application/pdf")
PNG = ("cat.png", b"\x89PNG fake", "image/png")


def upload_file(client, account, assignment_id, file=PDF):
    return client.post(f"/upload/assignment/{assignment_id}", files={"file": file}, headers=account["headers"])


def test_student_uploads_assignment_file(client, storage, professor, student):
    assignment = create_assignment(client, professor)
    r = upload_file(client, student, assignment["id"])
    assert r.status_code == 201
    body = r.json()
    assert body["message"] == "File uploaded successfully"
    stored = body["file"]
    assert stored["originalName"] == "answer.pdf"
    assert stored["format"] == "pdf"
    assert stored["size"] == len(PDF[1])
    assert stored["publicId"].startswith(f"social-learning/assignments/{assignment['id']}/{student['id']}-")
    assert stored["url"] == f"https://cdn.example.test/{stored['publicId']}"
    assert storage.objects[stored["publicId"]] == (PDF[1], "application/pdf")


def test_uploaded_url_can_be_submitted(client, professor, student):
    assignment = create_assignment(client, professor)
    url = upload_file(client, student, assignment["id"]).json()["file"]["url"]
    r = client.post(
        f"/assignments/{assignment['id']}/submit",
        json={"content": "See attached", "fileUrl": url},
        headers=student["headers"],
    )
    assert r.status_code == 201


def test_only_students_upload_assignment_files(client, professor):
    assignment = create_assignment(client, professor)
    r = upload_file(client, professor, assignment["id"])
    assert r.status_code == 403
    assert r.json() == {"error": "Only students can upload assignment files"}


def test_upload_to_overdue_assignment(client, professor, student):
    assignment = create_assignment(client, professor, hours=-1)
    r = upload_file(client, student, assignment["id"])
    assert r.status_code == 400
    assert r.json()["error"] == "Assignment submission deadline has passed"


def test_upload_missing_assignment(client, student):
    assert upload_file(client, student, 321).status_code == 404


def test_upload_without_file(client, professor, student):
    assignment = create_assignment(client, professor)
    r = client.post(f"/upload/assignment/{assignment['id']}", headers=student["headers"])
    assert r.status_code == 400
    assert r.json() == {"error": "Please select a file to upload"}


def test_upload_rejects_file_type(client, professor, student):
    assignment = create_assignment(client, professor)
    r = upload_file(client, student, assignment["id"], file=("run.exe", b"MZ", "application/x-msdownload"))
    assert r.status_code == 400
    assert r.json()["error"].startswith("Invalid file type")


def test_upload_rejects_large_file(client, professor, student):
    assignment = create_assignment(client, professor)
    big = ("big.pdf", b"0" * (10 * 1024 * 1024 + 1), "application/pdf")
    r = upload_file(client, student, assignment["id"], file=big)
    assert r.status_code == 400
    assert r.json() == {"error": "File size exceeds 10MB limit"}


def test_upload_storage_failure(client, storage, professor, student):
    assignment = create_assignment(client, professor)
    storage.fail = True
    r = upload_file(client, student, assignment["id"])
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to upload file"}


def test_upload_without_storage_configured(app, client, professor, student):
    assignment = create_assignment(client, professor)
    app.state.storage = None
    r = upload_file(client, student, assignment["id"])
    assert r.status_code == 503
    assert r.json()["error"] == "File upload service not configured"


def test_any_user_uploads_post_image(client, professor, student):
    for account in (professor, student):
        r = client.post("/upload/post-image", files={"image": PNG}, headers=account["headers"])
        assert r.status_code == 201
        assert r.json()["message"] == "Image uploaded successfully"
        assert r.json()["image"]["format"] == "png"


def test_post_image_validation(client, student):
    r = client.post("/upload/post-image", files={"image": PDF}, headers=student["headers"])
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid file type. Only JPG, PNG, GIF, and WEBP images are allowed"}

    big = ("huge.jpg", b"0" * (5 * 1024 * 1024 + 1), "image/jpeg")
    r = client.post("/upload/post-image", files={"image": big}, headers=student["headers"])
    assert r.json() == {"error": "Image size exceeds 5MB limit"}

    r = client.post("/upload/post-image", headers=student["headers"])
    assert r.json() == {"error": "Please select an image to upload"}


def test_upload_info(client, student):
    r = client.get("/upload/info", headers=student["headers"])
    assert r.status_code == 200
    body = r.json()
    assert body["configured"] is True
    assert body["limits"]["assignmentFiles"]["maxSize"] == "10MB"
    assert body["endpoints"]["postImageUpload"] == "/upload/post-image"


def test_upload_status_for_staff_only(app, client, professor, student):
    r = client.get("/upload/status", headers=professor["headers"])
    assert r.status_code == 200
    assert r.json()["status"] == "active"
    assert r.json()["bucket"] == "test-bucket"

    app.state.storage = None
    assert client.get("/upload/status", headers=professor["headers"]).json()["configured"] is False

    r = client.get("/upload/status", headers=student["headers"])
    assert r.status_code == 403
    assert r.json() == {"error": "Only admins and professors can check service status"}


def test_post_image_storage_failure(client, storage, student):
    storage.fail = True
    r = client.post("/upload/post-image", files={"image": PNG}, headers=student["headers"])
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to upload image"}


def test_uploaded_at_carries_utc_offset(client, student):
    r = client.post("/upload/post-image", files={"image": PNG}, headers=student["headers"])
    uploaded_at = r.json()["image"]["uploadedAt"]
    assert uploaded_at.endswith("Z") or uploaded_at.endswith("+00:00")
