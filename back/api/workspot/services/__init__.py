"""スポット検索・レビュー集計・お気に入りのサービス層（HTTP/ORM 非依存）。"""
