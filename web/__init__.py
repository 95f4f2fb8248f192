# JSON API
